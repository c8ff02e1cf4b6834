"""
Assistant serializers

Inbound: request validation. Outbound: user-format views of sessions,
invocations and the tool catalogue. Outbound serializers need a
``translator`` in their context; technical identifiers are never emitted.
"""
from rest_framework import serializers

SESSION_ID_PATTERN = r'^[A-Za-z0-9_-]{1,128}$'


class ChatRequestSerializer(serializers.Serializer):
    """Body of POST /api/assistant/messages/"""
    session_id = serializers.RegexField(SESSION_ID_PATTERN, required=False)
    text = serializers.CharField(max_length=4000, trim_whitespace=True)


class _TranslatedSerializer(serializers.Serializer):
    @property
    def translator(self):
        return self.context['translator']

    def _details(self, tool_name, arguments):
        return [
            {'label': label, 'value': value}
            for label, value in self.translator.to_user_format(tool_name, arguments)
        ]


class InvocationSerializer(_TranslatedSerializer):
    """A finished tool invocation in user format"""
    id = serializers.CharField(read_only=True)
    action = serializers.SerializerMethodField()
    state = serializers.SerializerMethodField()
    details = serializers.SerializerMethodField()
    result = serializers.SerializerMethodField()
    error = serializers.SerializerMethodField()

    def get_action(self, obj):
        return self.translator.display_name(obj.tool_name)

    def get_state(self, obj):
        return obj.state.value

    def get_details(self, obj):
        return self._details(obj.tool_name, obj.arguments)

    def get_result(self, obj):
        if not obj.result:
            return None
        return {
            'message': self.translator.scrub(obj.result.get('message', '')),
            'items': [self.translator.scrub(item) for item in obj.result.get('items', [])],
        }

    def get_error(self, obj):
        if obj.error is None:
            return None
        return {'code': obj.error.code, 'message': self.translator.scrub(obj.error.reason)}


class PendingSerializer(_TranslatedSerializer):
    """The action being assembled or awaiting confirmation"""
    action = serializers.SerializerMethodField()
    state = serializers.SerializerMethodField()
    details = serializers.SerializerMethodField()
    missing = serializers.SerializerMethodField()
    expires_at = serializers.DateTimeField(read_only=True)

    def get_action(self, obj):
        return self.translator.display_name(obj.tool_name)

    def get_state(self, obj):
        return obj.state.value

    def get_details(self, obj):
        return self._details(obj.tool_name, obj.arguments)

    def get_missing(self, obj):
        return self.translator.field_labels(obj.tool_name, obj.missing)


class MessageSerializer(_TranslatedSerializer):
    id = serializers.CharField(read_only=True)
    role = serializers.SerializerMethodField()
    content = serializers.CharField(read_only=True)
    invocations = serializers.SerializerMethodField()
    created_at = serializers.DateTimeField(read_only=True)

    def get_role(self, obj):
        return obj.role.value

    def get_invocations(self, obj):
        return InvocationSerializer(obj.invocations, many=True, context=self.context).data


class SessionSerializer(_TranslatedSerializer):
    """GET /api/assistant/sessions/<id>/"""
    session_id = serializers.CharField(source='id', read_only=True)
    messages = serializers.SerializerMethodField()
    pending = serializers.SerializerMethodField()
    created_at = serializers.DateTimeField(read_only=True)
    last_activity_at = serializers.DateTimeField(read_only=True)

    def get_messages(self, obj):
        return MessageSerializer(obj.messages, many=True, context=self.context).data

    def get_pending(self, obj):
        if obj.pending is None:
            return None
        return PendingSerializer(obj.pending, context=self.context).data


class TurnResultSerializer(_TranslatedSerializer):
    """Response of POST /api/assistant/messages/"""
    session_id = serializers.CharField(read_only=True)
    reply = serializers.CharField(read_only=True)
    invocation = serializers.SerializerMethodField()
    pending = serializers.SerializerMethodField()
    error = serializers.SerializerMethodField()

    def get_invocation(self, obj):
        if obj.invocation is None:
            return None
        return InvocationSerializer(obj.invocation, context=self.context).data

    def get_pending(self, obj):
        if obj.pending is None:
            return None
        return PendingSerializer(obj.pending, context=self.context).data

    def get_error(self, obj):
        return {'code': obj.error} if obj.error else None


class ToolSerializer(serializers.Serializer):
    """A tool as offered to users"""
    name = serializers.CharField(source='display_name', read_only=True)
    description = serializers.CharField(read_only=True)
    requires_confirmation = serializers.BooleanField(read_only=True)
    inputs = serializers.SerializerMethodField()

    def get_inputs(self, obj):
        return [
            {
                'label': spec.label,
                'required': spec.required,
                'type': spec.type.value,
                'options': [choice.label for choice in spec.choices],
            }
            for spec in obj.fields
        ]
