################################################################################
# © Copyright 2022 Zapata Computing Inc.
################################################################################
from .engine_runner import EngineCircuitRunner, SimulationResult
