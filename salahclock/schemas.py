# salahclock/schemas.py

from marshmallow import Schema, fields


class MessageSchema(Schema):
    message = fields.Str(required=True)


class DailyTimingsSchema(Schema):
    Fajr = fields.Str(required=True)
    Sunrise = fields.Str(required=True)
    Dhuhr = fields.Str(required=True)
    Asr = fields.Str(required=True)
    Maghrib = fields.Str(required=True)
    Isha = fields.Str(required=True)


class PrayerTimesResponseSchema(Schema):
    available = fields.Bool(required=True)
    date = fields.Date(allow_none=True)
    timings = fields.Nested(DailyTimingsSchema, required=True)


class NextPrayerSchema(Schema):
    name = fields.Str(required=True)
    time = fields.Str(required=True)


class RemainingDurationSchema(Schema):
    hours = fields.Int(required=True)
    minutes = fields.Int(required=True)
    seconds = fields.Int(required=True)
    text = fields.Function(lambda remaining: remaining.as_text())


class CountdownStateSchema(Schema):
    next_prayer = fields.Nested(NextPrayerSchema, required=True)
    remaining = fields.Nested(RemainingDurationSchema, required=True)
    computed_at = fields.DateTime(required=True)
    is_tomorrow = fields.Bool(required=True)


class CalendarRowSchema(Schema):
    """Schema for one row of the monthly calendar table."""
    weekday = fields.Str(allow_none=True)
    weekday_index = fields.Int(allow_none=True)
    gregorian_date = fields.Str(required=True)
    hijri_date = fields.Str(required=True)
    timings = fields.Dict(keys=fields.Str(), values=fields.Str())
    issues = fields.List(fields.Str())
    is_valid = fields.Bool(dump_only=True)


class CalendarResponseSchema(Schema):
    available = fields.Bool(required=True)
    rows = fields.List(fields.Nested(CalendarRowSchema), required=True)


class RefreshArgsSchema(Schema):
    refresh = fields.Bool(load_default=False)


class CountdownStatusSchema(Schema):
    counting_down = fields.Bool(required=True)
    message = fields.Str(required=True)
