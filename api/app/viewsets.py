"""Viewset building blocks shared by every resource.

Reads render each object with the groups the viewer holds on it; writes
validate input with the write-direction groups, send the lifecycle signals
from ``app.events`` inside one transaction and answer with the read-direction
representation of the stored object.
"""
from django.db import transaction
from rest_framework import status, viewsets
from rest_framework.response import Response

from app import events
from app.common.keys import t
from app.context import READ, WRITE, resolve_groups


def blame_values(model, viewer, *, created: bool) -> dict:
    if viewer is None:
        return {}
    names = {f.name for f in model._meta.get_fields()}
    values = {}
    if 'updated_by' in names:
        values['updated_by'] = viewer
    if created and 'created_by' in names:
        values['created_by'] = viewer
    return values


def query_flag(value):
    """Parse a boolean query parameter; ``None`` when absent or unparseable."""
    if value is None:
        return None
    lowered = value.strip().lower()
    if lowered in ('1', 'true', 'yes'):
        return True
    if lowered in ('0', 'false', 'no'):
        return False
    return None


class GroupedGenericViewSet(viewsets.GenericViewSet):
    entity_type = ''
    # Attribute path from an object (or validated data) to its project;
    # () means the object is the project, None means it has none.
    project_path = ('project',)

    def viewer(self):
        user = getattr(self.request, 'user', None)
        if user is None or not user.is_authenticated:
            return None
        return user

    def project_of(self, source):
        if self.project_path is None or source is None:
            return None
        value = source
        for name in self.project_path:
            if value is None:
                return None
            value = value.get(name) if isinstance(value, dict) else getattr(value, name, None)
        return None if isinstance(value, dict) else value

    def groups_for(self, direction, obj=None, project=None):
        if project is None:
            project = self.project_of(obj)
        return resolve_groups(
            self.entity_type,
            self.action,
            direction,
            self.viewer(),
            project=project,
            item=bool(getattr(self, 'detail', False)),
            subject=obj if self.entity_type == 'user' else None,
        )

    def context_for(self, direction, obj=None, project=None):
        context = self.get_serializer_context()
        context['groups'] = self.groups_for(direction, obj, project)
        context['viewer'] = self.viewer()
        return context

    def render(self, instance, serializer_class=None):
        serializer_class = serializer_class or self.get_serializer_class()
        return serializer_class(instance, context=self.context_for(READ, instance)).data

    def send(self, signal, **kwargs):
        model = self.get_queryset().model
        signal.send(sender=model, viewer=self.viewer(), request=self.request, **kwargs)


class GroupedListMixin:
    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        rows = [self.render(obj) for obj in (page if page is not None else queryset)]
        if page is not None:
            return self.get_paginated_response(rows)
        return Response(rows)


class GroupedRetrieveMixin:
    def retrieve(self, request, *args, **kwargs):
        return Response(self.render(self.get_object()))


class EventCreateMixin:
    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data, context=self.context_for(WRITE))
        serializer.is_valid(raise_exception=True)
        self.check_create_permission(serializer.validated_data)
        with transaction.atomic():
            instance = self.perform_create(serializer)
        return Response(self.render(instance), status=status.HTTP_201_CREATED)

    def check_create_permission(self, data):
        """Hook for rules that depend on the submitted data (e.g. the target project)."""

    def perform_create(self, serializer):
        model = serializer.Meta.model
        self.send(events.api_pre_create, data=serializer.validated_data)
        instance = serializer.save(**blame_values(model, self.viewer(), created=True))
        self.send(events.api_post_create, instance=instance)
        return instance


class EventUpdateMixin:
    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        serializer = self.get_serializer(
            instance, data=request.data, partial=partial, context=self.context_for(WRITE, instance)
        )
        serializer.is_valid(raise_exception=True)
        self.check_update_rules(instance, serializer.validated_data)
        with transaction.atomic():
            instance = self.perform_update(serializer)
        return Response(self.render(instance))

    def partial_update(self, request, *args, **kwargs):
        kwargs['partial'] = True
        return self.update(request, *args, **kwargs)

    def check_update_rules(self, instance, data):
        """Hook for transition rules between the stored and submitted state."""

    def perform_update(self, serializer):
        model = serializer.Meta.model
        self.send(events.api_pre_update, instance=serializer.instance, data=serializer.validated_data)
        instance = serializer.save(**blame_values(model, self.viewer(), created=False))
        self.send(events.api_post_update, instance=instance)
        return instance


class EventDestroyMixin:
    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        with transaction.atomic():
            self.send(events.api_pre_delete, instance=instance)
            self.perform_destroy(instance)
            self.send(events.api_post_delete, instance=instance)
        return Response(status=status.HTTP_204_NO_CONTENT)

    def perform_destroy(self, instance):
        instance.delete()


class ChildEntityViewSet(
    EventCreateMixin, GroupedRetrieveMixin, EventUpdateMixin, EventDestroyMixin, GroupedGenericViewSet
):
    """Create, admin retrieve, update and delete; read through the parent resource."""


class AppendOnlyViewSet(EventCreateMixin, GroupedRetrieveMixin, EventDestroyMixin, GroupedGenericViewSet):
    """Create, admin retrieve and delete only."""


class ResourceViewSet(
    EventCreateMixin,
    GroupedListMixin,
    GroupedRetrieveMixin,
    EventUpdateMixin,
    EventDestroyMixin,
    GroupedGenericViewSet,
):
    pass


def filter_by_name(queryset, params, field='name'):
    """Partial match on ``field`` and exact match on ``slug`` from the query string."""
    if params.get(field):
        queryset = queryset.filter(**{f'{field}__icontains': params[field]})
    if params.get('slug'):
        queryset = queryset.filter(slug=params['slug'])
    return queryset


def message_response(key='messages.request_received', status_code=status.HTTP_202_ACCEPTED):
    return Response({'success': True, 'message': t(key)}, status=status_code)
