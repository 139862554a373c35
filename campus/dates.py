from datetime import datetime

from rest_framework import serializers

# ISO dates from API clients, month/day/year from browser locale strings
DATE_INPUT_FORMATS = ['%Y-%m-%d', '%m/%d/%Y']


def parse_calendar_date(value):
    """Parse a calendar date in any accepted format, or return None."""
    if not value:
        return None
    value = str(value).strip()
    # tolerate full ISO timestamps such as 2025-01-10T00:00:00.000Z
    if 'T' in value:
        value = value.split('T', 1)[0]
    for fmt in DATE_INPUT_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


class CalendarDateField(serializers.Field):
    default_error_messages = {
        'invalid': 'Invalid date format',
    }

    def to_internal_value(self, data):
        parsed = parse_calendar_date(data)
        if parsed is None:
            self.fail('invalid')
        return parsed

    def to_representation(self, value):
        return value.isoformat()
