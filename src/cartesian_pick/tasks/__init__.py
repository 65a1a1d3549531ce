"""Import the pick/lift sequence and its configuration."""

from .outcome import Outcome as Outcome
from .pick_place_orchestrator import PickPhase as PickPhase
from .pick_place_orchestrator import PickPlaceOrchestrator as PickPlaceOrchestrator
from .pick_place_orchestrator import PickSequenceResult as PickSequenceResult
from .pick_sequence_config import PickSequenceConfig as PickSequenceConfig
