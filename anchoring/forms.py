"""Forms validating JSON payloads for the anchoring API.

Each form receives the decoded request body as its data. Validation keeps
HTML snapshots bounded and converts stored anchor records into engine
:class:`~anchoring.engine.types.Anchor` objects.
"""

from __future__ import annotations

from typing import Any, List, Tuple

from django import forms
from django.conf import settings

from .engine.types import Anchor, AnchorFormatError

DEFAULT_MAX_HTML_LENGTH = 5_000_000
DEFAULT_MAX_ANCHORS = 500


def _max_html_length() -> int:
    return int(getattr(settings, 'ANCHORING_MAX_HTML_LENGTH', DEFAULT_MAX_HTML_LENGTH))


class SnapshotForm(forms.Form):
    """Common fields for requests that carry a page snapshot."""

    html = forms.CharField(
        strip=False,
        label='HTML snapshot',
        help_text='Serialized page markup. Elements may carry data-box="top,left,width,height".',
    )
    scroll_x = forms.FloatField(required=False, initial=0.0)
    scroll_y = forms.FloatField(required=False, initial=0.0)

    def clean_html(self) -> str:
        html = self.cleaned_data['html']
        limit = _max_html_length()
        if len(html) > limit:
            raise forms.ValidationError(f'HTML snapshot exceeds {limit} characters.')
        return html

    @property
    def scroll(self) -> Tuple[float, float]:
        return (
            self.cleaned_data.get('scroll_x') or 0.0,
            self.cleaned_data.get('scroll_y') or 0.0,
        )


class FingerprintForm(SnapshotForm):
    """Fingerprint a whole element addressed by a CSS path."""

    selector = forms.CharField(max_length=2000, help_text='Path to the element to anchor.')


class SelectionFingerprintForm(SnapshotForm):
    """Fingerprint a text selection inside an element."""

    selector = forms.CharField(max_length=2000, help_text='Path to the enclosing element.')
    text = forms.CharField(
        required=False,
        strip=False,
        help_text='Selected text; empty means a collapsed selection.',
    )


class ReattachForm(SnapshotForm):
    """Reattach a list of stored anchor records to a page snapshot."""

    anchors = forms.JSONField(required=False, help_text='List of stored anchor records.')
    strip_markers = forms.BooleanField(
        required=False,
        help_text='Unwrap marker wrappers from a previous render before matching.',
    )

    def clean_anchors(self) -> List[Anchor]:
        """Convert each stored record, reporting the first malformed one."""

        raw_value: Any = self.cleaned_data.get('anchors')
        if raw_value in (None, ''):
            return []
        if not isinstance(raw_value, list):
            raise forms.ValidationError('Anchors must be a list of records.')

        limit = int(getattr(settings, 'ANCHORING_MAX_ANCHORS', DEFAULT_MAX_ANCHORS))
        if len(raw_value) > limit:
            raise forms.ValidationError(f'At most {limit} anchors can be reattached per request.')

        parsed: List[Anchor] = []
        for index, record in enumerate(raw_value, start=1):
            try:
                parsed.append(Anchor.from_dict(record))
            except AnchorFormatError as exc:
                raise forms.ValidationError(f'Anchor {index} is invalid: {exc}') from exc
        return parsed
