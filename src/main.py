"""
Bridge relay monitor.

Watches the blocks of one bridge hub and checks that the relay only imports
the bridged headers it needs, until at least one message has been received
from the bridged chain and at least one delivery confirmation has been sent
back. Exits 0 on success and 1 on failure.

Usage:
    python src/main.py --config config/config.yaml --bridge rococo-at-westend --timeout 600

Arguments:
    --config: Path to configuration file
    --bridge: Bridge descriptor name (overrides `bridge`)
    --timeout: Observation window in seconds (overrides `timeout_seconds`)
    --trace: Recorded block trace to replay (overrides `source.path`)
    --web: Serve the status API while observing
"""

import os
import sys
import argparse
import logging
import threading
from typing import Any, Dict, List, Optional, Tuple

import uvicorn
import yaml

from bridges.descriptor import BUILTIN_BRIDGES, REQUIRED_DESCRIPTOR_FIELDS
from ops.logging import setup_logging
from pipeline.engine import create_engine_from_config
from web.app import create_app
from web.state import state as web_state


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)
    """
    try:
        base_path = os.path.join(os.path.dirname(config_path), "default.yaml")
        base_cfg: Dict[str, Any] = {}
        if os.path.exists(base_path):
            with open(base_path, "r") as f:
                base_cfg = yaml.safe_load(f) or {}

        local_overrides_path = os.path.join(os.path.dirname(config_path), "config.yaml")
        local_cfg: Dict[str, Any] = {}
        if os.path.exists(local_overrides_path):
            with open(local_overrides_path, "r") as f:
                local_cfg = yaml.safe_load(f) or {}

        merged = _deep_merge(base_cfg, local_cfg)

        # Finally apply explicit config_path if it's not the local override file itself
        if os.path.exists(config_path) and os.path.abspath(config_path) != os.path.abspath(local_overrides_path):
            with open(config_path, "r") as f:
                explicit_cfg = yaml.safe_load(f) or {}
            merged = _deep_merge(merged, explicit_cfg)

        return merged
    except Exception as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)


def apply_cli_overrides(config: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    """Apply command-line values on top of the loaded configuration."""
    if args.bridge:
        config["bridge"] = args.bridge
    if args.timeout is not None:
        config["timeout_seconds"] = args.timeout
    if args.trace:
        source = config.setdefault("source", {}) or {}
        source["type"] = "replay"
        source["path"] = args.trace
        config["source"] = source
    if args.web:
        web = config.setdefault("web", {}) or {}
        web["enabled"] = True
        config["web"] = web
    return config


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ['bridge', 'timeout_seconds', 'source', 'log_path', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    # Bridge descriptors declared in config
    bridges = config.get('bridges', {}) or {}
    if not isinstance(bridges, dict):
        return False, "bridges must be a mapping of name to descriptor"
    for name, descriptor in bridges.items():
        if not isinstance(descriptor, dict):
            return False, f"bridges.{name} must be a mapping"
        missing: List[str] = [k for k in REQUIRED_DESCRIPTOR_FIELDS if k not in descriptor]
        if missing:
            return False, f"bridges.{name} is missing: {', '.join(missing)}"
        if not isinstance(descriptor['bridged_bridge_hub_para_id'], int):
            return False, f"bridges.{name}.bridged_bridge_hub_para_id must be an integer"

    bridge = config['bridge']
    if not isinstance(bridge, str) or not bridge:
        return False, "bridge must be a non-empty string"
    if bridge not in BUILTIN_BRIDGES and bridge not in bridges:
        known = sorted(set(BUILTIN_BRIDGES) | set(bridges))
        return False, f"Unknown bridge '{bridge}' (known: {', '.join(known)})"

    timeout = config['timeout_seconds']
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        return False, "timeout_seconds must be a positive number"

    # Validate block source
    source = config.get('source') or {}
    if not isinstance(source, dict):
        return False, "source must be a mapping"
    source_type = source.get('type', 'replay')
    if source_type != 'replay':
        return False, "source.type must be one of: replay"
    if not isinstance(source.get('path'), str) or not source.get('path'):
        return False, "source.path is required when source.type is 'replay'"
    interval = source.get('interval', 0)
    if not isinstance(interval, (int, float)) or interval < 0:
        return False, "source.interval must be a non-negative number"

    # Optional monitor settings
    monitor = config.get('monitor', {}) or {}
    if 'stats_log_interval' in monitor:
        sli = monitor['stats_log_interval']
        if not isinstance(sli, (int, float)) or sli <= 0:
            return False, "monitor.stats_log_interval must be a positive number"

    # Optional web settings
    web = config.get('web', {}) or {}
    if 'port' in web:
        if not isinstance(web['port'], int) or not (0 < web['port'] < 65536):
            return False, "web.port must be an integer between 1 and 65535"

    valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
    if config['log_level'] not in valid_log_levels:
        return False, f"log_level must be one of: {', '.join(valid_log_levels)}"

    return True, None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Bridge Relay Monitor')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--bridge', type=str, default=None,
                        help='Bridge descriptor name (e.g. rococo-at-westend)')
    parser.add_argument('--timeout', type=float, default=None,
                        help='Seconds to observe before failing')
    parser.add_argument('--trace', type=str, default=None,
                        help='Recorded block trace to replay')
    parser.add_argument('--web', action='store_true',
                        help='Serve the status API while observing')
    return parser


def start_web_app(host: str, port: int) -> threading.Thread:
    """Run the status API in a daemon thread."""
    def run_web_app():
        uvicorn.run(
            create_app(),
            host=host,
            port=port,
            log_level="warning",
        )

    web_thread = threading.Thread(target=run_web_app, daemon=True)
    web_thread.start()
    logging.info(f"Status API started on {host}:{port}")
    return web_thread


def main(argv: Optional[List[str]] = None) -> int:
    """Main application function. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    config = apply_cli_overrides(load_config(args.config), args)

    is_valid, error = validate_config(config)
    if not is_valid:
        logging.basicConfig(level=logging.ERROR)
        logging.error(f"Invalid configuration: {error}")
        return 1

    setup_logging(config['log_path'], config['log_level'])
    logging.info(f"Bridge relay monitor starting: bridge={config['bridge']}")

    web_cfg = config.get('web', {}) or {}
    status = None
    if web_cfg.get('enabled'):
        start_web_app(web_cfg.get('host', '127.0.0.1'), int(web_cfg.get('port', 5000)))
        status = web_state

    try:
        engine = create_engine_from_config(config, status=status)
    except (KeyError, ValueError) as e:
        logging.error(f"Failed to create monitor: {e}")
        return 1
    outcome = engine.run()

    if outcome.succeeded:
        logging.info(f"PASS: {outcome.reason}")
    else:
        logging.error(f"FAIL: {outcome.reason}")
    return outcome.exit_code


if __name__ == "__main__":
    sys.exit(main())
