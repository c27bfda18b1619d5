"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from bridges.descriptor import BUILTIN_BRIDGES
from models.block import BlockEvent, BlockNotification, StateSnapshot


RECEIVED = BlockEvent("bridgeRococoMessages", "MessagesReceived")
DELIVERED = BlockEvent("bridgeRococoMessages", "MessagesDelivered")
GRANDPA_IMPORT = BlockEvent("bridgeRococoGrandpa", "UpdatedBestFinalizedHeader")
PARA_IMPORT = BlockEvent("bridgeRococoParachains", "UpdatedParachainHead")
UNRELATED = BlockEvent("system", "ExtrinsicSuccess")

BRIDGE_HUB_PARA_ID = 1013

# Bridge storage once the bridged bridge hub head is known
SYNCED_STATE = StateSnapshot(grandpa_authority_set_id=5, para_heads=frozenset({BRIDGE_HUB_PARA_ID}))


def make_block(number, *events, parent_state=SYNCED_STATE, current_state=None):
    """Block whose storage stays at `parent_state` unless told otherwise."""
    return BlockNotification.create(
        number=number,
        events=events,
        parent_state=parent_state,
        current_state=current_state or parent_state,
    )


@pytest.fixture
def descriptor():
    """Rococo bridge as seen from Westend bridge hub."""
    return BUILTIN_BRIDGES["rococo-at-westend"]


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml and a trace."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    trace = tmp_path / "trace.yaml"
    trace.write_text("""
blocks:
  - number: 1
    parent_state: {grandpa_authority_set_id: 5, para_heads: [1013]}
    events:
      - {section: bridgeRococoMessages, method: MessagesReceived}
  - number: 2
    events:
      - {section: bridgeRococoGrandpa, method: UpdatedBestFinalizedHeader}
      - {section: bridgeRococoMessages, method: MessagesDelivered}
""")

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text(f"""
bridge: "rococo-at-westend"
timeout_seconds: 5

source:
  type: "replay"
  path: "{trace.as_posix()}"
  interval: 0

log_path: "{(tmp_path / 'logs' / 'test.log').as_posix()}"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config(tmp_path):
    """Return a valid configuration dictionary."""
    return {
        "bridge": "rococo-at-westend",
        "timeout_seconds": 30,
        "source": {
            "type": "replay",
            "path": "traces/rococo-at-westend.yaml",
            "interval": 0,
        },
        "monitor": {"stats_log_interval": 60},
        "web": {"enabled": False, "port": 5000},
        "log_path": str(tmp_path / "logs" / "test.log"),
        "log_level": "INFO",
    }
