"""Import interfaces and utilities for visualizing goals and trajectories."""

from .visualization_sink import ConsoleVisualizationConfig as ConsoleVisualizationConfig
from .visualization_sink import ConsoleVisualizationSink as ConsoleVisualizationSink
from .visualization_sink import VisualizationSink as VisualizationSink
from .visualization_sink import safe_publish as safe_publish
