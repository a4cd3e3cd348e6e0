from projects.receivers import connect_stamping

from .models import (
    Proposal,
    UsedActionMandate,
    UsedArgument,
    UsedCounterArgument,
    UsedFractionInterest,
    UsedNegation,
    UsedProblem,
)

USED_MODELS = (UsedArgument, UsedProblem, UsedCounterArgument, UsedNegation, UsedActionMandate, UsedFractionInterest)

connect_stamping(
    [Proposal, *USED_MODELS],
    paths={Proposal: ('project',), **{model: ('proposal', 'project') for model in USED_MODELS}},
)
