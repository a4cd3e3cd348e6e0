import os

from django.conf import settings
from django.conf.urls.static import static
from django.db import DatabaseError, connections
from django.http import HttpResponse
from django.urls import include, path
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from accounts.tokens import LoggedTokenObtainPairView
from accounts.views import UserViewSet, ValidationViewSet
from app.errors import error_response
from councils.views import CouncilViewSet, FactionViewSet, FederalStateViewSet, FractionViewSet, ParliamentViewSet
from projects.views import (
    ActionMandateViewSet,
    ArgumentViewSet,
    CategoryViewSet,
    CounterArgumentViewSet,
    FactionDetailsViewSet,
    FactionInterestViewSet,
    FractionDetailsViewSet,
    FractionInterestViewSet,
    NegationViewSet,
    PartnerViewSet,
    ProblemViewSet,
    ProjectMembershipViewSet,
    ProjectViewSet,
)
from proposals.views import (
    ProposalViewSet,
    UsedActionMandateViewSet,
    UsedArgumentViewSet,
    UsedCounterArgumentViewSet,
    UsedFractionInterestViewSet,
    UsedNegationViewSet,
    UsedProblemViewSet,
)


def healthz(_request):
    return HttpResponse('ok')


@api_view(['GET'])
@permission_classes([AllowAny])
def api_health(_request):
    """Lightweight liveness probe (no DB)."""
    return Response({'status': 'ok'})


@api_view(['GET'])
@permission_classes([AllowAny])
def api_ready(_request):
    """Readiness probe: checks DB and cache connectivity.

    Returns shape:
    {"status":"ok|error","db":bool,"cache":bool,"details":{...}}
    """
    db_ok = False
    cache_ok = False
    details = {}
    try:
        with connections['default'].cursor() as cur:
            cur.execute('SELECT 1')
            cur.fetchone()
        db_ok = True
    except DatabaseError as exc:
        details['db_error'] = str(exc)[:200]
    try:
        from django.core.cache import cache

        cache.set('ready_probe', '1', 5)
        cache_ok = cache.get('ready_probe') == '1'
    except Exception as exc:  # noqa: BLE001
        details['cache_error'] = str(exc)[:200]
    status = 'ok' if db_ok else 'error'
    payload = {'status': status, 'db': db_ok, 'cache': cache_ok, 'details': details}
    if status == 'error':
        return error_response('ready_check_failed', 'One or more readiness checks failed', status=503, meta=payload)
    return Response(payload)


router = DefaultRouter()
router.register(r'users', UserViewSet, basename='user')
router.register(r'validations', ValidationViewSet, basename='validation')
router.register(r'categories', CategoryViewSet, basename='category')
router.register(r'federal_states', FederalStateViewSet, basename='federal-state')
router.register(r'councils', CouncilViewSet, basename='council')
router.register(r'parliaments', ParliamentViewSet, basename='parliament')
router.register(r'fractions', FractionViewSet, basename='fraction')
router.register(r'factions', FactionViewSet, basename='faction')
router.register(r'projects', ProjectViewSet, basename='project')
router.register(r'project_memberships', ProjectMembershipViewSet, basename='project-membership')
router.register(r'problems', ProblemViewSet, basename='problem')
router.register(r'arguments', ArgumentViewSet, basename='argument')
router.register(r'counter_arguments', CounterArgumentViewSet, basename='counter-argument')
router.register(r'negations', NegationViewSet, basename='negation')
router.register(r'action_mandates', ActionMandateViewSet, basename='action-mandate')
router.register(r'partners', PartnerViewSet, basename='partner')
router.register(r'fraction_details', FractionDetailsViewSet, basename='fraction-details')
router.register(r'faction_details', FactionDetailsViewSet, basename='faction-details')
router.register(r'fraction_interests', FractionInterestViewSet, basename='fraction-interest')
router.register(r'faction_interests', FactionInterestViewSet, basename='faction-interest')
router.register(r'proposals', ProposalViewSet, basename='proposal')
router.register(r'used_arguments', UsedArgumentViewSet, basename='used-argument')
router.register(r'used_problems', UsedProblemViewSet, basename='used-problem')
router.register(r'used_counter_arguments', UsedCounterArgumentViewSet, basename='used-counter-argument')
router.register(r'used_negations', UsedNegationViewSet, basename='used-negation')
router.register(r'used_action_mandates', UsedActionMandateViewSet, basename='used-action-mandate')
router.register(r'used_fraction_interests', UsedFractionInterestViewSet, basename='used-fraction-interest')

urlpatterns = [
    path('healthz', healthz),
    path('api/health', api_health),
    path('api/ready', api_ready),
    path('api/token', LoggedTokenObtainPairView.as_view()),
    path('api/token/refresh', TokenRefreshView.as_view()),
    path('api/', include(router.urls)),
]

if settings.DEBUG or os.getenv('SERVE_MEDIA', '0') == '1':
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
