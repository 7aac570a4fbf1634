"""JSON views for the anchoring API.

Each view decodes the request body, validates it with the matching form
from :mod:`anchoring.forms` and hands the cleaned data to the service
helpers. Responses are always JSON so browser clients can persist the
returned anchor records as they are.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from .forms import FingerprintForm, ReattachForm, SelectionFingerprintForm
from .services import ElementNotFound, fingerprint_element, fingerprint_selection, reattach_records

logger = logging.getLogger(__name__)


class BadPayload(ValueError):
    """Raised when the request body is not a JSON object."""


def _json_body(request: HttpRequest) -> Dict[str, Any]:
    try:
        payload = json.loads(request.body.decode('utf-8') or '{}')
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise BadPayload(f'Request body is not valid JSON: {exc}') from exc
    if not isinstance(payload, dict):
        raise BadPayload('Request body must be a JSON object.')
    return payload


def _form_data(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten the optional ``scroll`` object into the form's scroll fields."""

    data = dict(payload)
    scroll = data.pop('scroll', None)
    if isinstance(scroll, dict):
        data.setdefault('scroll_x', scroll.get('x'))
        data.setdefault('scroll_y', scroll.get('y'))
    return data


def _bad_request(request: HttpRequest, errors: Any, status: int = 400) -> JsonResponse:
    logger.info('Rejected %s request: %s', request.path, errors)
    return JsonResponse({'errors': errors}, status=status)


def _not_found(request: HttpRequest, exc: ElementNotFound) -> JsonResponse:
    return _bad_request(request, {'selector': [str(exc)]}, status=404)


@csrf_exempt
@require_POST
def fingerprint(request: HttpRequest) -> JsonResponse:
    """Fingerprint the element addressed by ``selector`` in ``html``."""

    try:
        payload = _json_body(request)
    except BadPayload as exc:
        return _bad_request(request, {'__all__': [str(exc)]})

    form = FingerprintForm(_form_data(payload))
    if not form.is_valid():
        return _bad_request(request, form.errors.get_json_data())

    try:
        anchor = fingerprint_element(
            form.cleaned_data['html'],
            form.cleaned_data['selector'],
            scroll=form.scroll,
        )
    except ElementNotFound as exc:
        return _not_found(request, exc)
    return JsonResponse({'anchor': anchor.to_dict()})


@csrf_exempt
@require_POST
def fingerprint_text_selection(request: HttpRequest) -> JsonResponse:
    """Fingerprint ``text`` selected inside the element at ``selector``.

    A collapsed or blank selection is not an error: the response carries
    ``{"anchor": null}`` so the client simply stores nothing.
    """

    try:
        payload = _json_body(request)
    except BadPayload as exc:
        return _bad_request(request, {'__all__': [str(exc)]})

    form = SelectionFingerprintForm(_form_data(payload))
    if not form.is_valid():
        return _bad_request(request, form.errors.get_json_data())

    try:
        anchor = fingerprint_selection(
            form.cleaned_data['html'],
            form.cleaned_data['selector'],
            form.cleaned_data.get('text') or '',
        )
    except ElementNotFound as exc:
        return _not_found(request, exc)
    return JsonResponse({'anchor': anchor.to_dict() if anchor is not None else None})


@csrf_exempt
@require_POST
def reattach(request: HttpRequest) -> JsonResponse:
    """Resolve stored anchors against a fresh page snapshot."""

    try:
        payload = _json_body(request)
    except BadPayload as exc:
        return _bad_request(request, {'__all__': [str(exc)]})

    form = ReattachForm(_form_data(payload))
    if not form.is_valid():
        return _bad_request(request, form.errors.get_json_data())

    body = reattach_records(
        form.cleaned_data['html'],
        form.cleaned_data['anchors'],
        scroll=form.scroll,
        strip_markers=form.cleaned_data.get('strip_markers', False),
    )
    return JsonResponse(body)


@require_GET
def health(request: HttpRequest) -> JsonResponse:
    return JsonResponse({'status': 'ok'})
