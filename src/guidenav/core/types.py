"""Core type definitions."""

from typing import NewType

# Root-relative URL of a guide page (e.g., "/guide/components/index.html")
URLPath = NewType("URLPath", str)

# Language tag as used in label spans (e.g., "en", "zh-CN")
LanguageCode = NewType("LanguageCode", str)
