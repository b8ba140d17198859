"""
Gemini Request Builders
=======================
Turn photos (and an optional category list) or an existing listing plus a
user request into the request objects the Gemini client sends.

Both builders reject bad input before any network call is made.
"""

import base64
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..exceptions import InputError
from ..schema.listing import Listing
from .prompts import listing_prompt, refinement_prompt

ALLOWED_IMAGE_TYPES = ("image/png", "image/jpeg", "image/webp")

_EXTENSION_MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
}


@dataclass
class ImageBlob:
    """Raw uploaded photo"""
    data: bytes
    mime_type: str
    filename: Optional[str] = None

    @classmethod
    def from_path(cls, image_path: str) -> "ImageBlob":
        """Read a local image, taking the MIME type from its extension"""
        path = Path(image_path)
        mime_type = _EXTENSION_MIME_TYPES.get(path.suffix.lower())
        if mime_type is None:
            raise InputError(f"Unsupported image type: {path.name} (use PNG, JPEG or WEBP)")
        return cls(data=path.read_bytes(), mime_type=mime_type, filename=path.name)


@dataclass
class ImagePart:
    """Base64 image payload ready for Gemini's inline_data part"""
    mime_type: str
    data: str

    def to_part(self) -> Dict[str, Any]:
        return {"inline_data": {"mime_type": self.mime_type, "data": self.data}}


@dataclass
class GenerationRequest:
    prompt: str
    images: List[ImagePart]
    use_search: bool = True

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "contents": [{
                "parts": [
                    {"text": self.prompt},
                    *[image.to_part() for image in self.images],
                ]
            }],
        }
        if self.use_search:
            payload["tools"] = [{"google_search": {}}]
        return payload


@dataclass
class RefinementRequest:
    prompt: str
    use_search: bool = field(default=False, init=False)

    def to_payload(self) -> Dict[str, Any]:
        return {"contents": [{"parts": [{"text": self.prompt}]}]}


def check_image_type(image: ImageBlob) -> None:
    if image.mime_type not in ALLOWED_IMAGE_TYPES:
        name = image.filename or image.mime_type
        raise InputError(f"Unsupported image type: {name} (use PNG, JPEG or WEBP)")


def encode_image(image: ImageBlob) -> ImagePart:
    check_image_type(image)
    return ImagePart(
        mime_type=image.mime_type,
        data=base64.b64encode(image.data).decode("utf-8"),
    )


def build_generation_request(images: Sequence[ImageBlob],
                             categories: Optional[Sequence[str]] = None) -> GenerationRequest:
    """
    Build the listing generation request.

    Args:
        images: Product photos, sent in the given order
        categories: Allowed category paths; when non-empty the model must
            pick from them, otherwise it suggests a category freely

    Raises:
        InputError: no images, or an image type Gemini is not sent
    """
    if not images:
        raise InputError("No files provided")

    return GenerationRequest(
        prompt=listing_prompt(categories),
        images=[encode_image(image) for image in images],
        use_search=True,
    )


def build_refinement_request(listing: Optional[Listing], instruction: str) -> RefinementRequest:
    """
    Build a request asking Gemini to apply ``instruction`` to ``listing``.

    The listing is sent without its id and sources; the model is asked for
    the whole updated object back.
    """
    if listing is None:
        raise InputError("There is no listing to refine.")
    if not instruction or not instruction.strip():
        raise InputError("Please describe the change you want to make.")

    listing_json = json.dumps(listing.to_prompt_dict(), indent=2, ensure_ascii=False)
    return RefinementRequest(prompt=refinement_prompt(listing_json, instruction))
