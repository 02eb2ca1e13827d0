from django.contrib import admin

from ticketing.models import Event, MerchandiseVariant, Registration, Team, TeamMember


class MerchandiseVariantInline(admin.TabularInline):
    model = MerchandiseVariant
    extra = 1


class TeamMemberInline(admin.TabularInline):
    model = TeamMember
    extra = 0
    readonly_fields = ["participant_id", "event", "joined_at"]


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ["name", "type", "status", "registration_count", "created_at"]
    list_filter = ["type", "status"]
    search_fields = ["name"]
    readonly_fields = ["registration_count", "revenue"]
    inlines = [MerchandiseVariantInline]


@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    list_display = ["ticket_id", "event", "participant_id", "status", "attended"]
    list_filter = ["status", "attended", "event"]
    search_fields = ["ticket_id"]
    readonly_fields = ["ticket_id", "registered_at", "attendance_timestamp"]


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ["name", "event", "target_size", "status", "invite_code"]
    list_filter = ["status", "event"]
    inlines = [TeamMemberInline]
