################################################################################
# © Copyright 2022 Zapata Computing Inc.
################################################################################
from ._random_circuits import CATALOGUE_GATE_NAMES, create_random_circuit
