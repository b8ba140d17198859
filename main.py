#!/usr/bin/env python3
"""
eBay Listing Assistant - Main CLI Application
=============================================
Menu-driven terminal client: load photos and category files, generate a
listing with Gemini, refine or edit it, and browse history.
"""

import os
import sys
from pathlib import Path

from ebay_lister.ai import GeminiLister, ImageBlob
from ebay_lister.exceptions import ListingError
from ebay_lister.logging_config import configure_logging
from ebay_lister.schema import CONDITIONS
from ebay_lister.session import ListingSession
from ebay_lister.storage import HistoryStore

session = None


def clear_screen():
    """Clear the console screen"""
    os.system('cls' if os.name == 'nt' else 'clear')


def print_header():
    """Print the application header"""
    print("="*70)
    print("🚀 EBAY LISTING ASSISTANT - Photos to Listing with Gemini")
    print("="*70)
    print()


def print_menu():
    """Print the main menu"""
    snapshot = session.snapshot()
    print("\n📋 MAIN MENU")
    print(f"   Photos: {snapshot['image_count']}  |  Categories: {snapshot['category_count']}"
          f"  |  History: {len(snapshot['history'])}")
    print("-"*70)
    print("1️⃣  Load Product Photos")
    print("2️⃣  Load eBay Category CSV Files")
    print("3️⃣  Analyze Photos (Generate Listing)")
    print("4️⃣  Refine Current Listing")
    print("5️⃣  Edit Current Listing Field")
    print("6️⃣  View Current Listing")
    print("7️⃣  History")
    print("8️⃣  Clear")
    print("0️⃣  Exit")
    print("-"*70)


def get_input(prompt, default=None):
    """Get user input with optional default"""
    if default:
        value = input(f"{prompt} [{default}]: ").strip()
        return value if value else default
    return input(f"{prompt}: ").strip()


def pause():
    input("\nPress Enter to continue...")


def load_photos():
    """Ask for photo paths until a blank line"""
    images = []
    print("\n📸 Enter photo paths (PNG, JPEG or WEBP; blank to finish)")
    while True:
        path = get_input(f"  Photo #{len(images)+1}")
        if not path:
            break
        try:
            images.append(ImageBlob.from_path(path))
        except (ListingError, OSError) as e:
            print(f"  ❌ {e}")

    if images:
        session.set_images(images)
        print(f"\n✅ {len(images)} photo(s) loaded")
    else:
        print("\n⚠️  No photos loaded")
    pause()


def load_categories():
    """Ask for one or two category CSV paths"""
    paths = [p for p in (get_input("\n🗂️  Category CSV #1"), get_input("   Category CSV #2 (optional)")) if p]
    try:
        files = [(Path(p).name, Path(p).read_bytes()) for p in paths]
        categories = session.load_category_files(files)
        print(f"\n✅ {len(categories)} categories loaded from {len(files)} file(s)")
    except (ListingError, OSError) as e:
        print(f"\n❌ {e}")
    pause()


def show_listing(listing=None):
    listing = listing or session.listing
    if listing is None:
        print("\n⚠️  No active listing")
        return

    blocks = listing.export_blocks()
    print("\n" + "="*70)
    print(f"🏷️  {blocks['title']}  ({len(listing.title)}/80)")
    print("="*70)
    print(f"\n🗂️  Category: {blocks['category']}")
    print(f"🔧 Condition: {blocks['condition']}")
    print(f"💲 Price: {blocks['price']}")
    print(f"   {listing.price_recommendation.justification}")
    print(f"\n📦 Shipping:\n{blocks['shipping']}")
    print(f"\n📋 Item Specifics:\n{blocks['item_specifics']}")
    print(f"\n📝 Description:\n{blocks['description']}")
    if listing.sources:
        print("\n🔗 Sources:")
        for source in listing.sources:
            print(f"   - {source.title}: {source.uri}")


def analyze():
    print("\n🤖 Analyzing photos with Gemini (this can take a minute)...")
    try:
        listing = session.analyze()
    except ListingError as e:
        print(f"\n❌ {e}")
    else:
        show_listing(listing)
    pause()


def refine():
    instruction = get_input("\n✏️  What should change?")
    try:
        listing = session.refine(instruction)
    except ListingError as e:
        print(f"\n❌ {e}")
    else:
        show_listing(listing)
    pause()


def edit_field():
    if session.listing is None:
        print("\n⚠️  No active listing")
        pause()
        return

    print("\nFields: title, category_suggestion, condition, description")
    field = get_input("Field to edit")
    if field == "condition":
        for i, cond in enumerate(CONDITIONS, 1):
            print(f"  {i}. {cond}")
        choice = get_input("Choose condition (1-3)", "2")
        value = CONDITIONS[int(choice) - 1] if choice.isdigit() and 1 <= int(choice) <= 3 else choice
    else:
        value = get_input("New value")

    try:
        session.update_listing({field: value})
        print("\n✅ Listing updated")
    except ListingError as e:
        print(f"\n❌ {e}")
    pause()


def view_history():
    snapshot = session.snapshot()
    if not snapshot["history"]:
        print("\n📭 History is empty")
        pause()
        return

    print("\n🕘 HISTORY")
    for i, item in enumerate(snapshot["history"], 1):
        print(f"  {i}. {item['title']}")
    choice = get_input("\nNumber to load, 'c' to clear history, blank to go back")
    if choice.lower() == "c":
        session.clear_history()
        print("\n✅ History cleared")
    elif choice.isdigit() and 1 <= int(choice) <= len(snapshot["history"]):
        show_listing(session.load_from_history(snapshot["history"][int(choice) - 1]["id"]))
    pause()


def main():
    """Main application loop"""
    global session

    configure_logging()
    clear_screen()
    print_header()

    try:
        session = ListingSession(lister=GeminiLister.from_env(), history_store=HistoryStore())
    except ValueError as e:
        print(f"❌ {e}")
        sys.exit(1)

    actions = {
        "1": load_photos,
        "2": load_categories,
        "3": analyze,
        "4": refine,
        "5": edit_field,
        "6": lambda: (show_listing(), pause()),
        "7": view_history,
        "8": session.clear,
    }

    while True:
        print_menu()
        choice = get_input("\nSelect an option", "0")
        if choice == "0":
            print("\n👋 Goodbye!")
            sys.exit(0)
        action = actions.get(choice)
        if action is None:
            print("\n❌ Invalid option. Please try again.")
            pause()
            continue
        action()


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n\n👋 Interrupted by user. Goodbye!")
        sys.exit(0)
