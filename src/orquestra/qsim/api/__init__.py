################################################################################
# © Copyright 2022 Zapata Computing Inc.
################################################################################
from .circuit_runner import BaseCircuitRunner, CircuitRunner
from .simulation_engine import BaseSimulationEngine, SimulationEngine
