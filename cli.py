from __future__ import annotations

import argparse
import json
import sys

import uvicorn

from inspector.config import InspectorConfig
from inspector.errors import ConfigError, DeserializationError, InputError
from inspector.loader import load_module
from inspector.logging import get_logger, setup_logging
from inspector.summarize import summarize_module

logger = get_logger("cli")


def cmd_inspect(args: argparse.Namespace) -> int:
	try:
		config = InspectorConfig.from_env().merged(
			address_length=args.address_length,
			log_level=args.log_level,
		)
	except ConfigError as e:
		print(f"error: {e}", file=sys.stderr)
		return 1
	setup_logging(config.log_level, config.log_file)
	try:
		module = load_module(args.path, config)
	except (InputError, DeserializationError) as e:
		print(f"error: {e}", file=sys.stderr)
		return 1

	summaries = summarize_module(module)
	logger.info("Summarized %d of %d functions", len(summaries), len(module.function_defs))
	print(json.dumps([s.to_json_dict() for s in summaries], separators=(",", ":")))
	return 0


def cmd_serve(args: argparse.Namespace) -> int:
	try:
		config = InspectorConfig.from_env()
	except ConfigError as e:
		print(f"error: {e}", file=sys.stderr)
		return 1
	setup_logging(config.log_level, config.log_file)
	uvicorn.run("api:app", host=args.host, port=args.port, reload=args.reload)
	return 0


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(prog="move-inspector")
	sub = parser.add_subparsers(dest="cmd", required=True)

	pi = sub.add_parser("inspect", help="Summarize every function of a compiled module as JSON")
	pi.add_argument("path", help="Path to the compiled module (.mv)")
	pi.add_argument("--address-length", type=int, default=None, help="Account address width in bytes")
	pi.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR")
	pi.set_defaults(func=cmd_inspect)

	ps = sub.add_parser("serve", help="Run FastAPI server")
	ps.add_argument("--host", default="127.0.0.1")
	ps.add_argument("--port", type=int, default=8000)
	ps.add_argument("--reload", action="store_true")
	ps.set_defaults(func=cmd_serve)
	return parser


def main(argv=None) -> int:
	args = build_parser().parse_args(argv)
	return args.func(args)


if __name__ == "__main__":
	sys.exit(main())
