import os
from urllib.parse import urlparse

from django.core.management.base import BaseCommand

REQUIRED_ALWAYS = [
    'SECRET_KEY',
    'PUBLIC_BASE_URL',
]

# These must differ for rotation strategy
DISTINCT_SECRET_PAIRS = [
    ('SECRET_KEY', 'JWT_SIGNING_KEY'),
]

# Conditional groups, validated when they apply
GROUPS = {
    'redis': {
        'vars': ['REDIS_URL'],
        'require_if': ['CELERY_BROKER_URL', 'CELERY_RESULT_BACKEND'],
        'when': [('CELERY_TASK_ALWAYS_EAGER', lambda v: v in (None, '', '0', 'false', 'False'))],
    },
    'smtp': {
        'vars': ['EMAIL_HOST', 'MAIL_SENDER_DOMAIN'],
        'when': [('EMAIL_BACKEND', lambda v: bool(v) and 'smtp' in v)],
    },
}

SECURITY_INVARIANTS = [
    ('ALLOWED_HOSTS', lambda v: '*' not in v.split(','), 'ALLOWED_HOSTS must not contain * in production'),
    ('CORS_ALLOW_ALL', lambda v: v in {'', '0', 'False', 'false', None}, 'CORS_ALLOW_ALL must be 0/empty in production'),
]

URL_MUST_BE_HTTPS = ['PUBLIC_BASE_URL']

# Never echoed by --debug
SECRET_PREFIXES = ('SECRET', 'JWT', 'EMAIL_HOST_PASSWORD', 'DATABASE_URL', 'REDIS_URL')


def _applies(group, get) -> bool:
    return all(predicate(get(dep)) for dep, predicate in group.get('when') or [])


class Command(BaseCommand):
    help = 'Validate environment configuration for common production pitfalls. Exits non-zero on failure.'

    def add_arguments(self, parser):
        parser.add_argument('--strict', action='store_true', help='Fail on warnings as well as errors.')
        parser.add_argument('--debug', action='store_true', help='Print extra context.')

    def handle(self, *args, **options):
        errors: list[str] = []
        warnings: list[str] = []
        strict = options.get('strict')
        env = os.environ
        get = env.get
        production = get('DEBUG', '0') not in ('1', 'true', 'True')

        # 1. Required always
        for var in REQUIRED_ALWAYS:
            if not get(var):
                errors.append(f'Missing required variable: {var}')

        # 2. Distinct secret pairs
        for a, b in DISTINCT_SECRET_PAIRS:
            av, bv = get(a), get(b)
            if production and not bv:
                errors.append(f'Missing required variable: {b}')
            if av and bv and av == bv:
                errors.append(f'{b} should differ from {a} for rotation safety')

        # 3. Conditional groups; only warnings outside production
        for key, group in GROUPS.items():
            required_vars = group.get('vars', [])
            triggered = any(get(trigger) for trigger in group.get('require_if', []))
            if not (_applies(group, get) or triggered):
                continue
            for rv in required_vars:
                if get(rv):
                    continue
                if production:
                    errors.append(f"Group '{key}' missing required var {rv}")
                else:
                    warnings.append(f'[debug] Suggested var for {key} not set: {rv}')

        # 4. Security invariants
        if production:
            for name, predicate, msg in SECURITY_INVARIANTS:
                val = get(name)
                if val is not None and not predicate(val):
                    errors.append(msg)

        # 5. HTTPS required URLs
        for name in URL_MUST_BE_HTTPS:
            val = get(name)
            if val and urlparse(val).scheme != 'https':
                warnings.append(f'{name} should be https (got: {val})')

        # 6. Print summary
        for w in warnings:
            self.stdout.write(self.style.WARNING(f'WARN: {w}'))
        if strict and warnings and not errors:
            self.stderr.write(self.style.ERROR(f'env_doctor failed with {len(warnings)} warning(s) in strict mode.'))
            raise SystemExit(2)
        if errors:
            for e in errors:
                self.stderr.write(self.style.ERROR(f'ERROR: {e}'))
            self.stderr.write(self.style.ERROR(f'env_doctor failed with {len(errors)} error(s).'))
            raise SystemExit(1 if not strict else 2)
        self.stdout.write(self.style.SUCCESS('env_doctor passed with no fatal errors.'))
        if options.get('debug'):
            self.stdout.write('DEBUG VAR SNAPSHOT:')
            for k in sorted(env):
                if k.isupper() and not k.startswith(SECRET_PREFIXES):
                    self.stdout.write(f'  {k}={env[k]}')
