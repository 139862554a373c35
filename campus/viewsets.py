from rest_framework import status, viewsets
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from users.permissions import HasCapability


class RecordViewSet(viewsets.ModelViewSet):
    """
    ModelViewSet answering with the ``{message, <record>}`` envelope.

    Subclasses set ``record_name``/``record_plural`` and their own
    ``capabilities``; ``get_queryset`` applies the role-derived visibility
    filter. Updates are always partial (PUT only touches the fields sent).
    """

    record_name = 'record'
    record_plural = 'records'
    created_message = None
    updated_message = None
    permission_classes = [HasCapability]
    capabilities = {}
    http_method_names = ['get', 'post', 'put', 'patch', 'delete', 'head', 'options']

    @property
    def label(self):
        return self.record_name.replace('_', ' ').capitalize()

    def get_output_serializer(self, *args, **kwargs):
        return self.get_serializer(*args, **kwargs)

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        serializer = self.get_output_serializer(queryset, many=True)
        return Response({self.record_plural: serializer.data})

    def retrieve(self, request, *args, **kwargs):
        instance = self.get_object()
        return Response({self.record_name: self.get_output_serializer(instance).data})

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.perform_create(serializer)
        return Response({
            'message': self.created_message or f"{self.label} created successfully",
            self.record_name: self.get_output_serializer(serializer.instance).data,
        }, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        self.perform_update(serializer)
        return Response({
            'message': self.updated_message or f"{self.label} updated successfully",
            self.record_name: self.get_output_serializer(serializer.instance).data,
        })

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        self.perform_destroy(instance)
        return Response({'message': f"{self.label} deleted successfully"}, status=status.HTTP_200_OK)

    def ensure(self, condition, message):
        """Raise 403 unless an ownership rule holds."""
        if not condition:
            raise PermissionDenied(message)
