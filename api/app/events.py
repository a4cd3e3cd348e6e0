"""Lifecycle signals sent by the API write paths.

The ``api_*`` signals are sent by ``app.viewsets`` around every create, update
and delete, with the model class as sender and ``viewer`` / ``request``
keyword arguments. Pre-create receivers get the validated ``data`` dict (no
instance exists yet) and may add to it; every other receiver gets ``instance``.

Receivers run synchronously, in connection order, inside the request
transaction. Raising a DRF ``APIException`` from a receiver aborts the request.
"""
from django.dispatch import Signal

api_pre_create = Signal()
api_post_create = Signal()
api_pre_update = Signal()
api_post_update = Signal()
api_pre_delete = Signal()
api_post_delete = Signal()

# kwargs: project, viewer, request, report (dict)
project_reported = Signal()
# kwargs: user, request, validation_url
user_registered = Signal()
# sender: Validation; kwargs: validation, viewer, data, request
validation_confirmed = Signal()
# sender: Validation; kwargs: validation
validation_expired = Signal()
