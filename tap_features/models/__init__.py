"""Keyboard geometry model."""

from tap_features.models.keyboard import KeyBounds, KeyboardLayout, LayoutParams

__all__ = ["KeyBounds", "KeyboardLayout", "LayoutParams"]
