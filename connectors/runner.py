from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from connectors.client import LiveKitClient
from connectors.config import SourceConfig, merge_with_defaults, validate_config
from connectors.engine import INCREMENTAL, SyncEngine
from connectors.errors import StreamNotFoundError
from connectors.messages import (
    CatalogMessage,
    ConnectionStatus,
    ConnectionStatusMessage,
    MessageEmitter,
    SpecMessage,
)
from connectors.state_store import CursorStore, load_state
from connectors.streams import AVAILABLE_STREAMS, get_stream
from core.config import settings
from core.logging import configure_logging, log_event, set_run_id

logger = logging.getLogger("livekit.source")

DOCUMENTATION_URL = "https://docs.livekit.io/home/server/"

ClientFactory = Callable[[SourceConfig], LiveKitClient]


class SourceRunner:
    """Implements the spec/check/discover/read commands of the connector."""

    def __init__(self, emitter: Optional[MessageEmitter] = None, client_factory: ClientFactory = LiveKitClient) -> None:
        self._emitter = emitter or MessageEmitter()
        self._client_factory = client_factory

    def spec(self) -> Dict[str, Any]:
        schema = SourceConfig.model_json_schema()
        schema["required"] = ["api_key", "api_secret", "endpoint_url", "start_date"]
        spec = {"documentationUrl": DOCUMENTATION_URL, "connectionSpecification": schema}
        self._emitter.raw(SpecMessage(spec=spec))
        return spec

    async def check(self, raw_config: Mapping[str, Any]) -> ConnectionStatus:
        try:
            config = validate_config(merge_with_defaults(raw_config))
            async with self._client_factory(config) as client:
                await client.test_connection()
            status = ConnectionStatus(status="SUCCEEDED")
        except Exception as exc:
            logger.error("Connection check failed", exc_info=exc)
            status = ConnectionStatus(status="FAILED", message=str(exc) or "Connection check failed")
        self._emitter.raw(ConnectionStatusMessage(connectionStatus=status))
        return status

    def discover(self) -> Dict[str, List[Dict[str, Any]]]:
        catalog = {"streams": [definition.catalog_entry() for definition in AVAILABLE_STREAMS.values()]}
        self._emitter.raw(CatalogMessage(catalog=catalog))
        return catalog

    async def read(
        self,
        raw_config: Mapping[str, Any],
        catalog: Optional[Mapping[str, Any]] = None,
        state: Optional[CursorStore] = None,
    ) -> CursorStore:
        config = validate_config(merge_with_defaults(raw_config))
        store = state or CursorStore()
        async with self._client_factory(config) as client:
            for name, sync_mode in selected_streams(config, catalog):
                try:
                    definition = get_stream(name)
                except StreamNotFoundError as exc:
                    self._emitter.log("WARN", str(exc))
                    continue
                engine = SyncEngine(
                    definition,
                    client,
                    config,
                    state=store.stream_state(name),
                    emitter=self._emitter,
                    sync_mode=sync_mode,
                )
                stream_state = await engine.read()
                if stream_state:
                    store.update(name, stream_state)
                log_event(logger, "stream.completed", stream=name, state=stream_state)
        return store


def selected_streams(config: SourceConfig, catalog: Optional[Mapping[str, Any]]) -> Iterator[Tuple[str, str]]:
    if not catalog:
        for name in config.streams:
            yield name, INCREMENTAL
        return
    for entry in catalog.get("streams", []):
        sync_mode = entry.get("sync_mode") or INCREMENTAL
        if sync_mode == "null":
            continue
        stream = entry.get("stream") or {}
        yield stream.get("name") or entry.get("name"), sync_mode


def _read_json(path: Optional[str]) -> Dict[str, Any]:
    if not path:
        return {}
    return json.loads(Path(path).read_text(encoding="utf-8"))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="source-livekit", description="LiveKit source connector")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("spec", help="Output the connector specification")
    check = subparsers.add_parser("check", help="Check the connection configuration")
    check.add_argument("--config", required=True)
    discover = subparsers.add_parser("discover", help="Discover the available streams")
    discover.add_argument("--config")
    read = subparsers.add_parser("read", help="Read records from the source")
    read.add_argument("--config", required=True)
    read.add_argument("--catalog")
    read.add_argument("--state")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(settings.log_level)
    set_run_id()
    runner = SourceRunner()
    if args.command == "spec":
        runner.spec()
        return 0
    if args.command == "discover":
        runner.discover()
        return 0
    if args.command == "check":
        asyncio.run(runner.check(_read_json(args.config)))
        return 0
    try:
        asyncio.run(runner.read(_read_json(args.config), _read_json(args.catalog), load_state(args.state)))
    except Exception:
        logger.exception("Error during read operation")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
