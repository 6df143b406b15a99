"""Project settings."""

from pathlib import Path

# This is the location of the project configuration directory
CONF_SOURCE = "conf"

# Going up from stackgraph to the project root
PROJECT_ROOT = Path(__file__).parents[1]

PARAMETERS_PATH = "parameters"
