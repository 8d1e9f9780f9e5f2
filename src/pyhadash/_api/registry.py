"""Registry queries rendered through ``/api/template``.

The REST API has no registry endpoint, so areas, entity->area/device links
and devices are extracted with Jinja templates evaluated server-side.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from pyhadash._api.template import parse_template_json, render_template
from pyhadash._constants import REGISTRY_DOMAINS
from pyhadash._transport import Transport
from pyhadash.exceptions import HaTransportError, RegistryFetchError
from pyhadash.models.registry import Area, Device, RegistryEntry

_logger = logging.getLogger(__name__)

_ModelT = TypeVar("_ModelT", bound=BaseModel)

AREAS_TEMPLATE = (
    "[{% for area_id in areas() %}"
    '{"area_id": {{ area_id | tojson }}, "name": {{ area_name(area_id) | tojson }}}'
    "{% if not loop.last %},{% endif %}"
    "{% endfor %}]"
)

_ENTITY_DOMAIN_TEMPLATE = (
    "{%% for state in states.%(domain)s %%}"
    '{"entity_id": {{ state.entity_id | tojson }}, '
    '"area_id": {{ area_id(state.entity_id) | tojson }}, '
    '"device_id": {{ device_id(state.entity_id) | tojson }}},'
    "{%% endfor %%}"
)

DEVICES_TEMPLATE = (
    "{% set ns = namespace(seen=[]) %}"
    "{% for state in states %}"
    "{% set dev = device_id(state.entity_id) %}"
    "{% if dev and dev not in ns.seen %}"
    "{% set ns.seen = ns.seen + [dev] %}"
    '{"device_id": {{ dev | tojson }}, '
    '"name": {{ (device_attr(dev, "name_by_user") or device_attr(dev, "name") or "Unknown") | tojson }}, '
    '"manufacturer": {{ (device_attr(dev, "manufacturer") or "") | tojson }}, '
    '"model": {{ (device_attr(dev, "model") or "") | tojson }}, '
    '"area_id": {{ device_attr(dev, "area_id") | tojson }}},'
    "{% endif %}"
    "{% endfor %}"
)


def entity_registry_template(domains: Sequence[str] = REGISTRY_DOMAINS) -> str:
    """Template listing ``entity_id``/``area_id``/``device_id`` for *domains*.

    Every item is followed by a comma; :func:`parse_template_json` strips
    the trailing one.
    """
    body = "".join(_ENTITY_DOMAIN_TEMPLATE % {"domain": domain} for domain in domains)
    return "[" + body + "]"


def _parse_items(text: str, model: type[_ModelT], *, piece: str) -> list[_ModelT]:
    try:
        raw_items = parse_template_json(text)
    except ValueError as exc:
        raise RegistryFetchError(f"Unparseable {piece} template output: {exc}") from exc
    items: list[_ModelT] = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            continue
        try:
            items.append(model.model_validate(raw))
        except ValidationError:
            _logger.debug("Skipping malformed %s item: %r", piece, raw)
    return items


async def _render(transport: Transport, template: str, *, piece: str) -> str:
    try:
        return await render_template(transport, template)
    except HaTransportError as exc:
        raise RegistryFetchError(f"Failed to fetch {piece}: {exc}") from exc


async def fetch_areas(transport: Transport) -> list[Area]:
    text = await _render(transport, AREAS_TEMPLATE, piece="areas")
    return _parse_items(text, Area, piece="areas")


async def fetch_entity_registry(
    transport: Transport,
    domains: Sequence[str] = REGISTRY_DOMAINS,
) -> list[RegistryEntry]:
    text = await _render(transport, entity_registry_template(domains), piece="entity registry")
    return _parse_items(text, RegistryEntry, piece="entity registry")


async def fetch_devices(transport: Transport) -> list[Device]:
    text = await _render(transport, DEVICES_TEMPLATE, piece="devices")
    return _parse_items(text, Device, piece="devices")
