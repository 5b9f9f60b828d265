from polyselect.errors import (
    AllDegreesFailedError,
    InvalidDegreeError,
    InvalidFoldCountError,
    NumericInstabilityError,
    PolySelectError,
)
from polyselect.selection import DegreeSelector, choose_degree, select_best_degree
from polyselect.workflow import degree_workflow, fit_final
