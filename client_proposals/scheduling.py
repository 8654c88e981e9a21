"""
Calendar of confirmed services (manual bookings and accepted proposals) and the
staff views built on top of it.
"""
import datetime
import logging
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from .models import CalendarEvent, Proposal, StaffAssignment

logger = logging.getLogger(__name__)

SOURCES = ("manual", "proposal")


def _iso(value):
    return value.isoformat() if value else None


def _money(value):
    return str(value) if value is not None else None


def proposal_calendar_title(proposal):
    return proposal.event_title or proposal.event_type_custom_pt or proposal.get_event_type_display()


def manual_entry(event):
    return {
        "id": str(event.pk),
        "source": "manual",
        "title": event.title,
        "eventDate": _iso(event.event_date),
        "eventTime": _iso(event.event_time),
        "eventEndDate": _iso(event.event_end_date),
        "clientName": event.client_name,
        "clientEmail": event.client_email,
        "clientPhone": event.client_phone,
        "clientCompany": event.client_company,
        "clientNif": event.client_nif,
        "eventLocation": event.event_location,
        "guestCount": event.guest_count,
        "eventType": event.event_type,
        "notes": event.notes,
        "status": event.status,
    }


def proposal_entry(proposal):
    return {
        "id": str(proposal.pk),
        "source": "proposal",
        "title": proposal_calendar_title(proposal),
        "eventDate": _iso(proposal.event_date),
        "eventTime": None,
        "eventEndDate": None,
        "clientName": proposal.client_name,
        "clientEmail": proposal.client_email,
        "clientPhone": proposal.client_phone,
        "eventLocation": proposal.event_location,
        "guestCount": proposal.guest_count,
        "eventType": proposal.event_type,
        "notes": proposal.event_notes,
        "status": "confirmed",
        "proposalId": str(proposal.pk),
        "referenceNumber": proposal.reference_number,
        "total": _money(proposal.total or proposal.subtotal),
    }


def calendar_entries(start=None, end=None):
    """
    Confirmed manual events plus accepted proposals that have an event date,
    in one list ordered by date.
    """
    events = CalendarEvent.objects.filter(status="confirmed")
    proposals = Proposal.objects.filter(status="accepted", event_date__isnull=False)
    if start:
        events = events.filter(event_date__gte=start)
        proposals = proposals.filter(event_date__gte=start)
    if end:
        events = events.filter(event_date__lte=end)
        proposals = proposals.filter(event_date__lte=end)

    entries = [manual_entry(e) for e in events] + [proposal_entry(p) for p in proposals]
    entries.sort(key=lambda e: (e["eventDate"] or "", e["eventTime"] or ""))
    return entries


def cancel_service(source, service_id):
    """
    Cancel a manual booking or a proposal and release the staff assigned to it.
    Returns the number of assignments removed.
    """
    if source not in SOURCES:
        raise ValueError(f"Unknown service source: {source}")

    with transaction.atomic():
        if source == "manual":
            event = CalendarEvent.objects.get(pk=service_id)
            event.status = "cancelled"
            event.save(update_fields=["status", "updated_at"])
            deleted, _ = StaffAssignment.objects.filter(calendar_event_id=service_id).delete()
        else:
            proposal = Proposal.objects.get(pk=service_id)
            proposal.cancel()
            deleted, _ = StaffAssignment.objects.filter(proposal_id=service_id).delete()

    logger.info("Cancelled %s service %s, removed %s assignments", source, service_id, deleted)
    return deleted


def service_summary(assignment):
    if assignment.calendar_event_id:
        event = assignment.calendar_event
        return {
            "id": str(event.pk),
            "source": "manual",
            "title": event.title,
            "eventDate": _iso(event.event_date),
            "eventLocation": event.event_location,
            "clientName": event.client_name,
        }
    if assignment.proposal_id:
        proposal = assignment.proposal
        return {
            "id": str(proposal.pk),
            "source": "proposal",
            "title": proposal_calendar_title(proposal),
            "eventDate": _iso(proposal.event_date),
            "eventLocation": proposal.event_location,
            "clientName": proposal.client_name,
        }
    return None


def assignment_payload(assignment):
    member = assignment.staff_member
    role = assignment.role
    return {
        "id": str(assignment.pk),
        "calendarEventId": str(assignment.calendar_event_id) if assignment.calendar_event_id else None,
        "proposalId": str(assignment.proposal_id) if assignment.proposal_id else None,
        "staffMemberId": str(member.pk),
        "staffName": member.full_name,
        "roleId": str(role.pk) if role else None,
        "roleName": role.name if role else "",
        "startTime": _iso(assignment.start_time),
        "endTime": _iso(assignment.end_time),
        "customHourlyRate": _money(assignment.custom_hourly_rate),
        "hoursWorked": _money(assignment.hours_worked),
        "totalPay": _money(assignment.total_pay),
        "notes": assignment.notes,
    }


def _with_relations(queryset):
    return queryset.select_related("staff_member", "role", "calendar_event", "proposal")


def assignments_for_staff(member_id):
    assignments = _with_relations(
        StaffAssignment.objects.filter(staff_member_id=member_id)
    ).order_by("-created_at")
    result = []
    for assignment in assignments:
        payload = assignment_payload(assignment)
        payload["service"] = service_summary(assignment)
        result.append(payload)
    return result


def month_bounds(month):
    """`month` is "YYYY-MM"; returns aware datetimes for the first instant of it and of the next month."""
    try:
        year, number = (int(part) for part in str(month).split("-"))
        first = datetime.date(year, number, 1)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid month: {month!r}") from exc
    following = datetime.date(year + number // 12, number % 12 + 1, 1)
    tz = timezone.get_current_timezone()
    return (
        timezone.make_aware(datetime.datetime.combine(first, datetime.time.min), tz),
        timezone.make_aware(datetime.datetime.combine(following, datetime.time.min), tz),
    )


def monthly_summary(month):
    start, end = month_bounds(month)
    assignments = _with_relations(
        StaffAssignment.objects.filter(start_time__gte=start, start_time__lt=end)
    ).order_by("start_time")

    by_staff = {}
    for assignment in assignments:
        member = assignment.staff_member
        row = by_staff.setdefault(
            member.pk,
            {
                "staffId": str(member.pk),
                "name": member.full_name,
                "totalHours": Decimal("0.00"),
                "totalPay": Decimal("0.00"),
                "services": [],
            },
        )
        row["totalHours"] += assignment.hours_worked or Decimal("0.00")
        row["totalPay"] += assignment.total_pay or Decimal("0.00")
        service = service_summary(assignment) or {}
        row["services"].append(
            {
                "id": str(assignment.pk),
                "role": assignment.role.name if assignment.role else "",
                "hoursWorked": _money(assignment.hours_worked),
                "totalPay": _money(assignment.total_pay),
                "startTime": _iso(assignment.start_time),
                "endTime": _iso(assignment.end_time),
                "title": service.get("title"),
                "eventDate": service.get("eventDate"),
            }
        )

    staff = sorted(by_staff.values(), key=lambda row: row["name"].lower())
    total_hours = sum((row["totalHours"] for row in staff), Decimal("0.00"))
    total_pay = sum((row["totalPay"] for row in staff), Decimal("0.00"))
    for row in staff:
        row["totalHours"] = str(row["totalHours"])
        row["totalPay"] = str(row["totalPay"])
    return {
        "month": month,
        "staffCount": len(staff),
        "totalHours": str(total_hours),
        "totalPay": str(total_pay),
        "staff": staff,
    }


def upcoming_by_staff(today=None):
    """Services from `today` onwards for each staff member, earliest first."""
    today = today or timezone.localdate()
    by_staff = {}
    for assignment in _with_relations(StaffAssignment.objects.all()):
        service = service_summary(assignment)
        if not service or not service["eventDate"] or service["eventDate"] < today.isoformat():
            continue
        if assignment.calendar_event_id and assignment.calendar_event.status == "cancelled":
            continue
        by_staff.setdefault(str(assignment.staff_member_id), []).append(
            {
                "id": service["id"],
                "title": service["title"],
                "eventDate": service["eventDate"],
                "clientName": service["clientName"],
            }
        )
    for services in by_staff.values():
        services.sort(key=lambda s: s["eventDate"])
    return by_staff
