"""Render the discovered registry for the terminal."""

import json
from typing import Mapping

from jinja2 import Environment, PackageLoader

from .session import DiscoveryResult


def _get_template_env() -> Environment:
    return Environment(
        loader=PackageLoader("rfdiscover", "templates"),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def _sorted_items(services: Mapping[str, frozenset[str]]) -> list[tuple[str, list[str]]]:
    return [(name, sorted(services[name])) for name in sorted(services)]


def render_text(services: Mapping[str, frozenset[str]]) -> str:
    """One ``name:`` header per service, then one indented line per host."""
    template = _get_template_env().get_template("report.txt.j2")
    return template.render(services=_sorted_items(services))


def render_json(services: Mapping[str, frozenset[str]]) -> str:
    return json.dumps(dict(_sorted_items(services)), indent=2) + "\n"


def render_report(result: DiscoveryResult, fmt: str = "text") -> str:
    if fmt == "json":
        return render_json(result.services)
    return render_text(result.services)


def summarize(result: DiscoveryResult) -> str:
    return (
        f"discovered {len(result.services)} service(s) on {result.host_count} host(s)"
        f" in {result.elapsed:.1f}s (stopped: {result.reason.value},"
        f" {result.events_received} event(s), {result.events_skipped} skipped)"
    )
