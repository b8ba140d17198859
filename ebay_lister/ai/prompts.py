"""
Gemini Prompt Templates
=======================
Instruction text for the two Gemini calls: generating a listing from photos
and refining an existing listing from a user request.
"""

from typing import Optional, Sequence

CLOSING_LINES = (
    "I ship super fast and super safe",
    "Don't hesitate to message me with any questions or offers!",
)


def category_instruction(categories: Optional[Sequence[str]] = None) -> str:
    """The only variable part of the listing prompt"""
    if categories:
        category_list = "\n".join(categories)
        return (
            "CRITICAL: You MUST select the most relevant category for the item from the "
            "following official eBay category list. Do not invent a category. "
            f"Here is the list:\n{category_list}"
        )
    return "Suggest the most likely eBay category path."


def listing_prompt(categories: Optional[Sequence[str]] = None) -> str:
    """Build the instruction block sent ahead of the product photos"""
    return f"""You are an expert eBay lister. Analyze the provided image(s) of a single product.

🔎 RESEARCH FIRST
Your primary tool is Google Search. You MUST use it to find exact model numbers, technical specifications, and recently SOLD prices for comparable items before writing anything.

🗂️ CATEGORY
{category_instruction(categories)}

📝 DESCRIPTION RULES (most important part of the listing)
1. **Factual and Direct**: No sales language, marketing fluff, or persuasive tone. Only facts found through search and visible in the images.
2. **Mobile-First Formatting**:
   * **Short Paragraphs**: 1-3 sentences per paragraph.
   * **Bulleted Lists**: Use '*' bullets for features, specifications, contents, and condition details.
   * **Clear Spacing**: A blank line between paragraphs and before the closing sentences.
3. **Mandatory Ending**: The description MUST end with these two sentences, each on its own line, with nothing after them:
"{CLOSING_LINES[0]}"
"{CLOSING_LINES[1]}"

📦 SHIPPING
Recommend a shipping setup based on the product's typical size and weight.

🎯 OUTPUT FORMAT
CRITICAL: Return a single, valid JSON object inside a ```json ... ``` block. Do not include any text outside of the block. The object must have exactly this structure:
{{
  "title": "MAX 80 CHARACTERS. Maximally keyword-dense, SEO-optimized title. Pack in every search term a buyer might use while staying readable. Structure: [Brand] [Model Name/Number] [Part Number, if available] [Key Specs, e.g. Color, Size, Capacity] [Core Function] [Condition].",
  "category_suggestion": "The full eBay category path.",
  "condition": "Exactly one of 'New', 'Used', or 'For parts or not working', judged from the images.",
  "description": "Factual, mobile-friendly description with short paragraphs, bullets, and the mandatory two-line ending.",
  "item_specifics": [{{"name": "string", "value": "string"}}],
  "price_recommendation": {{"price": 0.0, "justification": "string"}},
  "shipping_recommendation": {{"est_weight": "string", "est_dimensions": "string", "rec_service": "string"}}
}}

IMPORTANT:
- item_specifics names should be standard, widely searched terms (e.g. 'Compatible Model' rather than 'For Model'). Do not repeat facts already clear from the title; add details a buyer still needs.
- price is a number, not a string.
- price justification MUST be evidence-based and specific: cite comparable items that recently sold, with price and platform (e.g. 'A similar model in used condition sold for ~$150 on eBay last month'), and the market trends you found. Vague statements are unacceptable.
"""


def refinement_prompt(listing_json: str, user_request: str) -> str:
    """Build the instruction asking Gemini to apply one edit to a listing"""
    return f"""You are an intelligent eBay listing editor. Modify an existing eBay listing based on the user's request.
The user's request is: "{user_request}"

Here is the current listing data in JSON format:
```json
{listing_json}
```

Apply the user's requested change to the JSON data.
CRITICAL: Return the complete, updated, valid JSON object in a ```json ... ``` block. Do not return only the changed parts. Do not add any commentary or text outside the JSON block.
"""
