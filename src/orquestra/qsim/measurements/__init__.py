################################################################################
# © Copyright 2022 Zapata Computing Inc.
################################################################################
from ._born_rule import (
    MeasurementOutcome,
    basis_change_operations,
    born_probabilities,
    draw_bit,
    inverse_basis_change_operations,
    marginalize,
    project_onto_outcome,
    sample_bitstrings_from_probabilities,
)
from ._distribution import (
    MeasurementOutcomeDistribution,
    create_bitstring_distribution_from_probability_distribution,
    is_normalized,
)
from ._measurements import Measurements, convert_bitstring_to_int
