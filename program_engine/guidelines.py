"""
Scientific guideline lookup.

Any object with a `get_guideline(key)` method can serve as a guideline source.
GuidelineLibrary backs it with a YAML file.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor

import yaml

logger = logging.getLogger(__name__)

GUIDELINE_KEYS = (
    "volume_framework",
    "autoregulation",
    "periodization",
    "weak_point_intervention",
    "fatigue_management",
    "exercise_selection",
    "coaching_cues",
)


class GuidelineLibrary:
    """Guideline text loaded once from a YAML mapping of key -> text."""

    def __init__(self, path="guidelines.yaml"):
        self.path = path
        self._guidelines = None

    def _load(self):
        if self._guidelines is None:
            if not os.path.exists(self.path):
                logger.warning("Guideline file not found: %s", self.path)
                self._guidelines = {}
            else:
                with open(self.path, "r") as f:
                    self._guidelines = yaml.safe_load(f) or {}
        return self._guidelines

    def get_guideline(self, key):
        """Return guideline text for `key`, or None when it is missing or blank."""
        text = self._load().get(key)
        if not text or not str(text).strip():
            return None
        return str(text).strip()


def fetch_guidelines(source, keys=GUIDELINE_KEYS, max_workers=4):
    """
    Look up several guideline keys concurrently.

    Args:
        source: Object exposing get_guideline(key).
        keys: Keys to fetch.
        max_workers: Thread pool size.

    Returns:
        Dict of key -> text or None. A failing lookup yields None.
    """
    keys = list(keys)
    if source is None or not keys:
        return {key: None for key in keys}

    def _fetch(key):
        try:
            return source.get_guideline(key)
        except Exception as exc:
            logger.warning("Guideline lookup failed for %s: %s", key, exc)
            return None

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        results = list(executor.map(_fetch, keys))
    return dict(zip(keys, results))
