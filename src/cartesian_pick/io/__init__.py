"""Import utilities used for logging, configuration files, and user interfaces."""

from .logging import configure_logging as configure_logging
from .logging import console as console
from .yaml_utils import load_yaml_data as load_yaml_data
