from django.db.models import Q
from rest_framework import serializers
from rest_framework.validators import UniqueValidator

from app.common.keys import t
from app.context import field_groups as fg
from app.serializers import GroupedModelSerializer, is_staff_viewer

from .models import DELETED_USERNAME_RE, ROLES, USERNAME_RE, User, Validation

PASSWORD_KWARGS = {'min_length': 6, 'max_length': 200, 'write_only': True, 'trim_whitespace': False}


def validate_username_value(value: str) -> str:
    if not USERNAME_RE.match(value):
        raise serializers.ValidationError(t('violations.user.username_pattern'))
    if DELETED_USERNAME_RE.match(value):
        raise serializers.ValidationError(t('violations.user.username_reserved'))
    return value


def validate_validation_url(value: str) -> str:
    if '{{token}}' not in value or '{{id}}' not in value:
        raise serializers.ValidationError(t('violations.validation.url_placeholders'))
    return value


def _unique_username():
    return UniqueValidator(queryset=User.objects.all(), message=t('violations.user.username_taken'))


def _unique_email():
    return UniqueValidator(queryset=User.objects.all(), message=t('violations.user.email_taken'), lookup='iexact')


class UserSerializer(GroupedModelSerializer):
    username = serializers.CharField(
        min_length=2, max_length=20, validators=[validate_username_value, _unique_username()]
    )
    email = serializers.EmailField(max_length=255, validators=[_unique_email()])
    password = serializers.CharField(**PASSWORD_KWARGS)
    created_projects = serializers.SerializerMethodField()
    project_memberships = serializers.SerializerMethodField()

    field_groups = {
        'username': fg('user:read', 'user:create', 'user:admin-write'),
        'email': fg('user:read', 'user:create', 'user:admin-write'),
        'password': fg('user:create'),
        'first_name': fg('user:read', 'user:write'),
        'last_name': fg('user:read', 'user:write'),
        'roles': fg('user:admin-read', 'user:pm-read', 'user:self', 'user:admin-write'),
        'active': fg('user:admin-read', 'user:pm-read', 'user:admin-write'),
        'validated': fg('user:read', 'user:admin-write'),
        'created_at': fg('user:read'),
        'deleted_at': fg('user:admin-read', 'user:pm-read'),
        'created_projects': fg('user:admin-read', 'user:pm-read', 'user:self', 'user:register'),
        'project_memberships': fg('user:admin-read', 'user:pm-read', 'user:self', 'user:register'),
    }

    class Meta:
        model = User
        fields = [
            'id',
            'username',
            'email',
            'password',
            'first_name',
            'last_name',
            'roles',
            'active',
            'validated',
            'created_at',
            'deleted_at',
            'created_projects',
            'project_memberships',
        ]
        read_only_fields = ['created_at', 'deleted_at']

    def validate_roles(self, value):
        if not isinstance(value, list) or any(role not in ROLES for role in value):
            raise serializers.ValidationError(t('violations.user.invalid_role'))
        return sorted(set(value))

    def get_created_projects(self, obj):
        projects = obj.created_projects.all()
        if not is_staff_viewer(self.context.get('viewer')):
            projects = projects.filter(deleted_at__isnull=True, locked=False)
        return [{'id': p.pk, 'title': p.title, 'slug': p.slug} for p in projects]

    def get_project_memberships(self, obj):
        from projects.serializers import ProjectMembershipSerializer

        return ProjectMembershipSerializer(obj.project_memberships.all(), many=True, context=self.context).data

    def create(self, validated_data):
        password = validated_data.pop('password')
        return User.objects.create_user(password=password, **validated_data)


class RegistrationProjectSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=100)
    topic = serializers.CharField(min_length=2, max_length=1000)
    council = serializers.IntegerField()
    motivation = serializers.CharField(min_length=10, max_length=1000)
    skills = serializers.CharField(min_length=10, max_length=1000)

    def validate_title(self, value):
        from projects.serializers import validate_project_title

        return validate_project_title(value)

    def validate_council(self, value):
        from councils.models import Council

        council = Council.objects.filter(pk=value, deleted_at__isnull=True, active=True).first()
        if council is None:
            raise serializers.ValidationError(t('violations.project.council_inactive'))
        return council


class RegistrationMembershipSerializer(serializers.Serializer):
    project = serializers.IntegerField()
    role = serializers.CharField(default='applicant')
    motivation = serializers.CharField(min_length=10, max_length=1000)
    skills = serializers.CharField(min_length=10, max_length=1000)

    def validate_role(self, value):
        if value != 'applicant':
            raise serializers.ValidationError(t('violations.membership.registration_applicant_only'))
        return value

    def validate_project(self, value):
        from projects.models import Project

        project = Project.objects.find_non_deleted(value)
        if project is None:
            raise serializers.ValidationError(t('violations.project.not_found'))
        if project.locked:
            raise serializers.ValidationError(t('violations.project.locked'))
        return project


class RegistrationSerializer(serializers.Serializer):
    username = serializers.CharField(
        min_length=2, max_length=20, validators=[validate_username_value, _unique_username()]
    )
    email = serializers.EmailField(max_length=255, validators=[_unique_email()])
    password = serializers.CharField(**PASSWORD_KWARGS)
    first_name = serializers.CharField(max_length=50, required=False, allow_null=True, allow_blank=True)
    last_name = serializers.CharField(max_length=50, required=False, allow_null=True, allow_blank=True)
    validation_url = serializers.CharField(max_length=500, validators=[validate_validation_url])
    created_projects = RegistrationProjectSerializer(many=True, required=False)
    project_memberships = RegistrationMembershipSerializer(many=True, required=False)

    def validate_project_memberships(self, value):
        projects = [entry['project'].pk for entry in value]
        if len(projects) != len(set(projects)):
            raise serializers.ValidationError(t('violations.membership.duplicate'))
        return value


class PasswordResetRequestSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=255)
    validation_url = serializers.CharField(max_length=500, validators=[validate_validation_url])

    def find_user(self):
        value = self.validated_data['username']
        return User.objects.non_deleted().filter(Q(username=value) | Q(email__iexact=value)).first()


class ChangeEmailSerializer(serializers.Serializer):
    email = serializers.EmailField(max_length=255)
    confirmation_password = serializers.CharField(max_length=200, trim_whitespace=False)
    validation_url = serializers.CharField(max_length=500, validators=[validate_validation_url])

    def validate(self, attrs):
        user = self.context['user']
        if not user.check_password(attrs['confirmation_password']):
            raise serializers.ValidationError({'confirmation_password': [t('violations.user.wrong_password')]})
        email = attrs['email']
        if email.lower() == (user.email or '').lower():
            raise serializers.ValidationError({'email': [t('violations.user.email_unchanged')]})
        if User.objects.filter(email__iexact=email).exclude(pk=user.pk).exists():
            raise serializers.ValidationError({'email': [t('violations.user.email_taken')]})
        return attrs


class ChangePasswordSerializer(serializers.Serializer):
    password = serializers.CharField(**PASSWORD_KWARGS)
    confirmation_password = serializers.CharField(max_length=200, trim_whitespace=False)

    def validate(self, attrs):
        user = self.context['user']
        if not user.check_password(attrs['confirmation_password']):
            raise serializers.ValidationError({'confirmation_password': [t('violations.user.wrong_password')]})
        if user.check_password(attrs['password']):
            raise serializers.ValidationError({'password': [t('violations.user.password_unchanged')]})
        return attrs


class NewPasswordSerializer(serializers.Serializer):
    validation_url = serializers.CharField(max_length=500, validators=[validate_validation_url])


class ValidationSerializer(GroupedModelSerializer):
    class Meta:
        model = Validation
        fields = ['id', 'type', 'user', 'content', 'created_at', 'expires_at']
        read_only_fields = fields


class ValidationConfirmSerializer(serializers.Serializer):
    token = serializers.CharField(max_length=100)
    password = serializers.CharField(min_length=6, max_length=200, required=False, trim_whitespace=False)


class AddUserSerializer(serializers.Serializer):
    """Input of the ``add_user`` management command."""

    username = serializers.CharField(
        min_length=2, max_length=20, validators=[validate_username_value, _unique_username()]
    )
    email = serializers.EmailField(max_length=255, validators=[_unique_email()])
    password = serializers.CharField(**PASSWORD_KWARGS)
