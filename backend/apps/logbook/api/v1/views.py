from django.conf import settings
from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.api.exceptions import FeatureDisabled
from apps.core.api.permissions import IsAccountOwnerOrAdmin, IsAuthenticatedOrApiKey
from apps.core.exceptions import InvalidStateTransition
from apps.logbook.api.v1.serializers import (
    CreateLogEntryImportSerializer,
    FinalizeLogEntryImportSerializer,
    ListLogEntryImportsSerializer,
    LogEntryRecordSerializer,
    LogEntrySerializer,
)
from apps.logbook.import_service import LogEntryImportService
from apps.logbook.importer import ImportRecordError
from apps.logbook.imports import LogEntryImport


class UserLogImportsView(APIView):
    permission_classes = (IsAuthenticatedOrApiKey, IsAccountOwnerOrAdmin)
    service = LogEntryImportService()

    def check_permissions(self, request):
        if not settings.LOG_IMPORTS_ENABLED:
            raise FeatureDisabled()
        if not IsAuthenticatedOrApiKey().has_permission(request, self):
            self.permission_denied(request, message=IsAuthenticatedOrApiKey.message)
        self.target_user = get_object_or_404(get_user_model(), username=self.kwargs["username"])
        super().check_permissions(request)

    def get_import(self, import_id) -> LogEntryImport:
        import_ = self.service.get_import(import_id, owner=self.target_user)
        if import_ is None:
            raise NotFound("Import session not found.")
        return import_


class LogImportListView(UserLogImportsView):
    def get(self, request, username):
        serializer = ListLogEntryImportsSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        result = self.service.list_imports(owner=self.target_user, **serializer.validated_data)
        return Response({"data": [item.to_json() for item in result.data], "total_count": result.total_count})

    def post(self, request, username):
        serializer = CreateLogEntryImportSerializer(data=request.data or {})
        serializer.is_valid(raise_exception=True)
        import_ = self.service.create_import(self.target_user, **serializer.validated_data)
        return Response(import_.to_json(), status=status.HTTP_201_CREATED)


class LogImportDetailView(UserLogImportsView):
    def get(self, request, username, import_id):
        return Response(self.get_import(import_id).to_json())

    def post(self, request, username, import_id):
        import_ = self.get_import(import_id)
        max_batch = settings.LOG_IMPORT_MAX_BATCH
        if isinstance(request.data, list) and len(request.data) > max_batch:
            raise ValidationError({"records": f"No more than {max_batch} records may be added per request."})

        serializer = LogEntryRecordSerializer(data=request.data, many=True, allow_empty=False)
        serializer.is_valid(raise_exception=True)

        added = import_.add_records(serializer.validated_data)
        return Response(
            {"added_records": added, "total_records": import_.get_record_count()},
            status=status.HTTP_201_CREATED,
        )

    def delete(self, request, username, import_id):
        import_ = self.get_import(import_id)
        snapshot = import_.to_json()
        if not import_.cancel():
            raise NotFound("Import session not found.")
        return Response(snapshot)


class LogImportFinalizeView(UserLogImportsView):
    def post(self, request, username, import_id):
        import_ = self.get_import(import_id)
        serializer = FinalizeLogEntryImportSerializer(data=request.data or {})
        serializer.is_valid(raise_exception=True)

        try:
            entries = self.service.finalize_import(import_, **serializer.validated_data)
        except ImportRecordError as exc:
            raise ValidationError({"records": exc.errors or [str(exc)]}) from exc

        if entries is None:
            raise InvalidStateTransition("This import session has already been finalized.")
        return Response(LogEntrySerializer(entries, many=True).data, status=status.HTTP_201_CREATED)
