import json
import logging
from functools import wraps

from django.conf import settings
from django.db import transaction
from django.forms.models import model_to_dict
from django.http import HttpResponse, JsonResponse
from django.utils import dateparse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from . import scheduling, staff
from .catalog import load_catalog
from .composer import ClientInfo, EventInfo, compose, parse_date
from .forms import (
    CalendarEventForm,
    ClientForm,
    CompanyProfileForm,
    ProposalForm,
    ProposalMomentForm,
    ProposalServiceOptionRowForm,
    ProposalServiceRowForm,
    ServiceCategoryForm,
    ServiceForm,
    StaffAssignmentForm,
    StaffMemberForm,
    StaffRoleForm,
    TermsTemplateForm,
)
from .models import (
    EVENT_TYPE_CHOICES,
    CalendarEvent,
    Client,
    CompanyProfile,
    MomentItem,
    Proposal,
    ProposalMoment,
    ProposalServiceOption,
    Service,
    ServiceCategory,
    ServiceIncludedItem,
    ServicePricedOption,
    StaffAssignment,
    StaffMember,
    StaffMemberRole,
    StaffRole,
    TermsTemplate,
)
from .persistence import ProposalRows, load_document, save_rows, to_rows
from .pricing import to_decimal
from .rendering import pdf_filename, render_html, render_pdf
from .selection import Selection, SelectionError, parse_price
from .validators import is_valid_nif, is_valid_uuid

logger = logging.getLogger(__name__)

EVENT_TYPES = {code for code, _ in EVENT_TYPE_CHOICES}


# ---- Helpers ----


class BadRequest(Exception):
    pass


def error_response(message, status=400, **extra):
    return JsonResponse({"error": message, **extra}, status=status)


def not_found(label):
    return error_response(f"{label} not found.", status=404)


def parse_json(request):
    if not request.body:
        return {}
    try:
        payload = json.loads(request.body)
    except (ValueError, UnicodeDecodeError) as exc:
        raise BadRequest("Malformed JSON body.") from exc
    if not isinstance(payload, dict):
        raise BadRequest("Expected a JSON object.")
    return payload


def form_error(form):
    fields = {name: [str(e) for e in errors] for name, errors in form.errors.items()}
    first = next(iter(fields.items()), ("", ["Invalid data."]))
    message = first[1][0] if first[0] == "__all__" else f"{first[0]}: {first[1][0]}"
    return error_response(message, fields=fields)


def bind_form(form_class, payload, instance=None):
    """
    Bind a JSON payload to a model form. Fields missing from the payload keep
    the instance's current (or default) value so PATCH only touches what is sent.
    """
    instance = instance if instance is not None else form_class._meta.model()
    data = model_to_dict(instance, fields=form_class._meta.fields, exclude=form_class._meta.exclude)
    data.update(payload)
    return form_class(data=data, instance=instance)


def get_or_none(model, pk):
    return model.objects.filter(pk=pk).first()


def normalize_language(value):
    value = value or getattr(settings, "PROPOSAL_DEFAULT_LANGUAGE", "pt")
    return "en" if value == "en" else "pt"


def query_date(request, name):
    value = request.GET.get(name)
    if not value:
        return None
    try:
        parsed = dateparse.parse_date(value)
    except ValueError:
        parsed = None
    if parsed is None:
        raise BadRequest(f"{name} must be a date (YYYY-MM-DD).")
    return parsed


def serialize(instance, exclude=()):
    data = model_to_dict(instance, exclude=exclude)
    data["id"] = str(instance.pk)
    for name in ("created_at", "updated_at", "sent_at"):
        if hasattr(instance, name):
            data[name] = getattr(instance, name)
    return data


def api_view(methods):
    """csrf-exempt JSON endpoint restricted to `methods`, mapping BadRequest to 400."""

    def decorator(func):
        @wraps(func)
        def wrapper(request, *args, **kwargs):
            for value in kwargs.values():
                if not is_valid_uuid(value):
                    return error_response("Invalid id.")
            try:
                return func(request, *args, **kwargs)
            except BadRequest as exc:
                logger.warning("Rejected %s %s: %s", request.method, request.path, exc)
                return error_response(str(exc))

        return csrf_exempt(require_http_methods(methods)(wrapper))

    return decorator


def _create(form_class, payload, serializer=serialize):
    form = bind_form(form_class, payload)
    if not form.is_valid():
        return form_error(form)
    return JsonResponse(serializer(form.save()), status=201)


def _update(form_class, payload, instance, serializer=serialize):
    form = bind_form(form_class, payload, instance=instance)
    if not form.is_valid():
        return form_error(form)
    return JsonResponse(serializer(form.save()))


# ---- Clients ----


@api_view(["GET", "POST"])
def clients(request):
    if request.method == "POST":
        return _create(ClientForm, parse_json(request))
    qs = Client.objects.all()
    query = (request.GET.get("q") or "").strip()
    if query:
        qs = qs.filter(name__icontains=query) | qs.filter(company__icontains=query)
    return JsonResponse([serialize(c) for c in qs], safe=False)


@api_view(["GET", "PATCH", "DELETE"])
def client_detail(request, pk):
    client = get_or_none(Client, pk)
    if client is None:
        return not_found("Client")
    if request.method == "PATCH":
        return _update(ClientForm, parse_json(request), client)
    if request.method == "DELETE":
        client.delete()
        return JsonResponse({"success": True})
    return JsonResponse(serialize(client))


# ---- Catalog ----


@api_view(["GET", "POST"])
def categories(request):
    if request.method == "POST":
        return _create(ServiceCategoryForm, parse_json(request))
    return JsonResponse([serialize(c) for c in ServiceCategory.objects.all()], safe=False)


def service_payload(service):
    data = serialize(service)
    data["included_item_rows"] = [
        {"id": str(i.pk), "section_key": i.section_key, "text_pt": i.text_pt, "text_en": i.text_en, "sort_order": i.sort_order}
        for i in service.included_items.all()
    ]
    data["priced_options"] = [serialize(o) for o in service.priced_options.all()]
    return data


def _replace_service_children(service, payload):
    if "included_item_rows" in payload:
        service.included_items.all().delete()
        for position, row in enumerate(payload["included_item_rows"] or []):
            if not (row.get("text_pt") or "").strip():
                raise BadRequest("Included items need a Portuguese text.")
            ServiceIncludedItem.objects.create(
                service=service,
                section_key=row.get("section_key") or "default",
                text_pt=row["text_pt"].strip(),
                text_en=(row.get("text_en") or "").strip(),
                sort_order=position if row.get("sort_order") is None else row["sort_order"],
            )
    if "priced_options" in payload:
        service.priced_options.all().delete()
        for position, row in enumerate(payload["priced_options"] or []):
            if not (row.get("name_pt") or "").strip():
                raise BadRequest("Priced options need a Portuguese name.")
            ServicePricedOption.objects.create(
                service=service,
                name_pt=row["name_pt"].strip(),
                name_en=row.get("name_en") or "",
                description_pt=row.get("description_pt") or "",
                description_en=row.get("description_en") or "",
                pricing_type=row.get("pricing_type") or "fixed",
                price=to_decimal(row.get("price")),
                min_quantity=row.get("min_quantity"),
                sort_order=position if row.get("sort_order") is None else row["sort_order"],
            )


def _save_service(payload, instance=None):
    fields = {k: v for k, v in payload.items() if k not in ("included_item_rows", "priced_options")}
    form = bind_form(ServiceForm, fields, instance=instance)
    if not form.is_valid():
        return form_error(form)
    with transaction.atomic():
        service = form.save()
        _replace_service_children(service, payload)
    return JsonResponse(service_payload(service), status=200 if instance else 201)


@api_view(["GET", "POST"])
def services(request):
    if request.method == "POST":
        return _save_service(parse_json(request))
    qs = Service.objects.prefetch_related("included_items", "priced_options")
    if request.GET.get("active") == "1":
        qs = qs.filter(is_active=True)
    if request.GET.get("category"):
        qs = qs.filter(category_id=request.GET["category"])
    return JsonResponse([service_payload(s) for s in qs], safe=False)


@api_view(["GET", "PATCH", "DELETE"])
def service_detail(request, pk):
    service = get_or_none(Service, pk)
    if service is None:
        return not_found("Service")
    if request.method == "PATCH":
        return _save_service(parse_json(request), instance=service)
    if request.method == "DELETE":
        service.delete()
        return JsonResponse({"success": True})
    return JsonResponse(service_payload(service))


# ---- Moments ----


def moment_payload(moment):
    data = serialize(moment, exclude=["services"])
    data["items"] = [
        {
            "service": str(item.service_id),
            "name_pt": item.service.name_pt,
            "name_en": item.service.name_en,
            "is_default": item.is_default,
            "sort_order": item.sort_order,
        }
        for item in moment.moment_items.select_related("service")
    ]
    return data


@api_view(["GET", "POST"])
def moments(request):
    if request.method == "POST":
        return _create(ProposalMomentForm, parse_json(request), serializer=moment_payload)
    qs = ProposalMoment.objects.all()
    if request.GET.get("active") == "1":
        qs = qs.filter(is_active=True)
    return JsonResponse([moment_payload(m) for m in qs], safe=False)


@api_view(["GET", "PATCH", "DELETE"])
def moment_detail(request, pk):
    moment = get_or_none(ProposalMoment, pk)
    if moment is None:
        return not_found("Moment")
    if request.method == "PATCH":
        return _update(ProposalMomentForm, parse_json(request), moment, serializer=moment_payload)
    if request.method == "DELETE":
        moment.delete()
        return JsonResponse({"success": True})
    return JsonResponse(moment_payload(moment))


def _replace_moment_items(moment, items):
    moment.moment_items.all().delete()
    seen = set()
    for position, row in enumerate(items, start=1):
        if not isinstance(row, dict):
            raise BadRequest("Each item must be an object.")
        service_id = row.get("service_id")
        if not is_valid_uuid(service_id) or not Service.objects.filter(pk=service_id).exists():
            raise BadRequest(f"Unknown service: {service_id}")
        if str(service_id) in seen:
            raise BadRequest(f"Service listed twice: {service_id}")
        seen.add(str(service_id))
        sort_order = row.get("sort_order")
        if sort_order is not None and (not isinstance(sort_order, int) or sort_order < 0):
            raise BadRequest("sort_order must be a non-negative whole number.")
        MomentItem.objects.create(
            moment=moment,
            service_id=service_id,
            is_default=bool(row.get("is_default")),
            sort_order=position if sort_order is None else sort_order,
        )


@api_view(["POST"])
def moment_items_replace(request):
    """
    Replace every suggested service of a moment with the posted list::

        {"moment_id": ..., "items": [{"service_id": ..., "is_default": true, "sort_order": 1}]}
    """
    payload = parse_json(request)
    moment_id = payload.get("moment_id")
    if not is_valid_uuid(moment_id):
        return error_response("Invalid moment_id.")
    moment = get_or_none(ProposalMoment, moment_id)
    if moment is None:
        return not_found("Moment")
    items = payload.get("items") or []
    if not isinstance(items, list):
        return error_response("items must be a list.")
    with transaction.atomic():
        _replace_moment_items(moment, items)
    logger.info("Moment %s now suggests %s services", moment.key, len(items))
    return JsonResponse({"success": True, **moment_payload(moment)})


# ---- Company profile & terms ----


@api_view(["GET", "POST"])
def company_profile(request):
    profile = CompanyProfile.active()
    if request.method == "POST":
        return _update(CompanyProfileForm, parse_json(request), profile or CompanyProfile())
    if profile is None:
        return JsonResponse({"name": getattr(settings, "COMPANY_DEFAULT_NAME", "MSilva")})
    return JsonResponse(serialize(profile))


def _save_terms(payload, instance=None):
    form = bind_form(TermsTemplateForm, payload, instance=instance)
    if not form.is_valid():
        return form_error(form)
    with transaction.atomic():
        template = form.save()
        if template.is_default:
            TermsTemplate.objects.exclude(pk=template.pk).update(is_default=False)
    return JsonResponse(serialize(template), status=200 if instance else 201)


@api_view(["GET", "POST"])
def terms_templates(request):
    if request.method == "POST":
        return _save_terms(parse_json(request))
    return JsonResponse([serialize(t) for t in TermsTemplate.objects.all()], safe=False)


@api_view(["GET", "PATCH", "DELETE"])
def terms_template_detail(request, pk):
    template = get_or_none(TermsTemplate, pk)
    if template is None:
        return not_found("Terms template")
    if request.method == "PATCH":
        return _save_terms(parse_json(request), instance=template)
    if request.method == "DELETE":
        template.delete()
        return JsonResponse({"success": True})
    return JsonResponse(serialize(template))


# ---- Proposals ----


def proposal_payload(proposal, with_rows=False):
    data = serialize(proposal)
    if with_rows:
        lines = list(proposal.service_lines.all())
        data["proposal_services"] = [serialize(line) for line in lines]
        data["proposal_service_options"] = [
            serialize(opt)
            for opt in ProposalServiceOption.objects.filter(proposal_service__proposal=proposal)
        ]
    return data


def _rows_from_payload(payload):
    form = bind_form(ProposalForm, payload.get("proposal") or {})
    if not form.is_valid():
        return None, form_error(form)
    service_rows = []
    for raw in payload.get("services") or []:
        row_form = bind_form(ProposalServiceRowForm, raw)
        if not row_form.is_valid():
            return None, form_error(row_form)
        service_rows.append(row_form.cleaned_data)
    option_rows = []
    for raw in payload.get("options") or []:
        row_form = bind_form(ProposalServiceOptionRowForm, raw)
        if not row_form.is_valid():
            return None, form_error(row_form)
        if row_form.cleaned_data["service_index"] >= len(service_rows):
            return None, error_response("service_index does not match any service line.")
        option_rows.append(row_form.cleaned_data)
    return ProposalRows(proposal=form.cleaned_data, services=service_rows, options=option_rows), None


@api_view(["GET", "POST"])
def proposals(request):
    if request.method == "POST":
        payload = parse_json(request)
        rows, error = _rows_from_payload(payload)
        if error:
            return error
        proposal = save_rows(rows, status=payload.get("status"))
        return JsonResponse(proposal_payload(proposal, with_rows=True), status=201)
    qs = Proposal.objects.all()
    if request.GET.get("status"):
        qs = qs.filter(status=request.GET["status"])
    return JsonResponse([proposal_payload(p) for p in qs], safe=False)


def _client_info(payload):
    client_id = payload.get("clientId")
    raw = payload.get("client") or {}
    if client_id:
        if not is_valid_uuid(client_id):
            raise BadRequest("Invalid client id.")
        client = get_or_none(Client, client_id)
        if client is None:
            raise BadRequest("Client not found.")
        raw = {
            "name": client.name,
            "email": client.email,
            "phone": client.phone,
            "company": client.company,
            "nif": client.nif,
            **{k: v for k, v in raw.items() if v},
        }
    name = (raw.get("name") or "").strip()
    if not name:
        raise BadRequest("Client name is required.")
    nif = (raw.get("nif") or "").strip()
    if nif and not is_valid_nif(nif):
        raise BadRequest("Invalid NIF.")
    return ClientInfo(
        name=name,
        email=raw.get("email") or "",
        phone=raw.get("phone") or "",
        company=raw.get("company") or "",
        nif=nif,
    )


def _event_info(payload, guest_count):
    raw = payload.get("event") or {}
    event_type = raw.get("type") or "other"
    if event_type not in EVENT_TYPES:
        raise BadRequest(f"Unknown event type: {event_type}")
    return EventInfo(
        event_type=event_type,
        custom_label_pt=raw.get("customLabelPt") or "",
        custom_label_en=raw.get("customLabelEn") or "",
        title=raw.get("title") or "",
        date=raw.get("date"),
        location=raw.get("location") or "",
        guest_count=guest_count,
        notes=raw.get("notes") or "",
    )


def _terms_texts(payload):
    template_id = payload.get("termsTemplateId")
    if template_id:
        template = get_or_none(TermsTemplate, template_id) if is_valid_uuid(template_id) else None
        if template is None:
            raise BadRequest("Terms template not found.")
        return {"pt": template.content_pt, "en": template.content_en}
    terms = payload.get("terms")
    if terms is None:
        default = TermsTemplate.objects.filter(is_default=True).first()
        return {"pt": default.content_pt, "en": default.content_en} if default else {}
    return terms if isinstance(terms, dict) else {"pt": str(terms)}


@api_view(["POST"])
def proposal_compose(request):
    """
    Price a selection against the live catalog and store the resulting proposal.
    """
    payload = parse_json(request)
    catalog = load_catalog()
    try:
        selection = Selection.from_payload(payload, catalog)
        vat_rate = parse_price(payload.get("vatRate"), "vatRate")
    except SelectionError as exc:
        raise BadRequest(str(exc)) from exc
    language = normalize_language(payload.get("language"))
    intro = payload.get("intro") or {}
    document = compose(
        selection,
        catalog,
        language=language,
        client=_client_info(payload),
        event=_event_info(payload, selection.guest_count),
        company=CompanyProfile.active(),
        intro=intro if isinstance(intro, dict) else {language: str(intro)},
        terms=_terms_texts(payload),
        show_vat=bool(payload.get("showVat")),
        vat_rate=vat_rate,
    )
    if payload.get("validUntil"):
        document.valid_until = parse_date(payload["validUntil"])
    proposal = save_rows(to_rows(document), status=payload.get("status"))
    return JsonResponse(proposal_payload(proposal, with_rows=True), status=201)


@api_view(["GET", "PATCH"])
def proposal_detail(request, pk):
    proposal = get_or_none(Proposal, pk)
    if proposal is None:
        return not_found("Proposal")
    if request.method == "PATCH":
        payload = parse_json(request)
        status = payload.get("status")
        language = payload.get("language")
        if status is None and language is None:
            return error_response("Provide status or language.")
        fields = ["updated_at"]
        if status is not None:
            if status not in Proposal.EDITABLE_STATUSES:
                return error_response(f"Invalid status: {status}")
            proposal.status = status
            fields.append("status")
        if language is not None:
            if language not in ("pt", "en"):
                return error_response(f"Invalid language: {language}")
            proposal.language = language
            fields.append("language")
        proposal.save(update_fields=fields)
        logger.info("Proposal %s updated: %s", proposal.pk, ", ".join(fields[1:]))
    return JsonResponse(proposal_payload(proposal, with_rows=True))


@api_view(["POST"])
def proposal_accept(request, pk):
    proposal = get_or_none(Proposal, pk)
    if proposal is None:
        return not_found("Proposal")
    proposal.mark_accepted()
    logger.info("Proposal %s accepted", proposal.pk)
    return JsonResponse(proposal_payload(proposal))


def _request_language(request):
    return normalize_language(request.GET.get("lang"))


@api_view(["GET"])
def proposal_pdf(request, pk):
    proposal = get_or_none(Proposal, pk)
    if proposal is None:
        return not_found("Proposal")
    language = _request_language(request)
    document = load_document(proposal, language)
    pdf = render_pdf(document)
    proposal.mark_generated(language)
    response = HttpResponse(pdf, content_type="application/pdf")
    response["Content-Disposition"] = f'inline; filename="{pdf_filename(document)}"'
    return response


@api_view(["GET"])
def proposal_preview(request, pk):
    proposal = get_or_none(Proposal, pk)
    if proposal is None:
        return not_found("Proposal")
    document = load_document(proposal, _request_language(request))
    return HttpResponse(render_html(document))


# ---- Calendar ----


@api_view(["GET", "POST"])
def calendar_events(request):
    if request.method == "POST":
        return _create(CalendarEventForm, parse_json(request))
    entries = scheduling.calendar_entries(query_date(request, "start"), query_date(request, "end"))
    return JsonResponse(entries, safe=False)


@api_view(["PUT", "DELETE"])
def calendar_event_detail(request, pk):
    event = get_or_none(CalendarEvent, pk)
    if event is None:
        return not_found("Calendar event")
    if request.method == "DELETE":
        event.delete()
        return JsonResponse({"success": True})
    return _update(CalendarEventForm, parse_json(request), event)


@api_view(["POST"])
def calendar_event_cancel(request):
    payload = parse_json(request)
    source = payload.get("source")
    service_id = payload.get("id")
    if not source or not service_id:
        return error_response("source and id are required.")
    if source not in scheduling.SOURCES:
        return error_response(f"Unknown source: {source}")
    if not is_valid_uuid(service_id):
        return error_response("Invalid id.")
    try:
        removed = scheduling.cancel_service(source, service_id)
    except (CalendarEvent.DoesNotExist, Proposal.DoesNotExist):
        return not_found("Service")
    return JsonResponse({"success": True, "removedAssignments": removed})


# ---- Staff ----


@api_view(["GET", "POST"])
def staff_roles(request):
    if request.method == "POST":
        return _create(StaffRoleForm, parse_json(request))
    return JsonResponse([serialize(r) for r in StaffRole.objects.all()], safe=False)


@api_view(["PATCH", "DELETE"])
def staff_role_detail(request, pk):
    role = get_or_none(StaffRole, pk)
    if role is None:
        return not_found("Staff role")
    if request.method == "DELETE":
        role.delete()
        return JsonResponse({"success": True})
    return _update(StaffRoleForm, parse_json(request), role)


def staff_member_payload(member):
    data = serialize(member, exclude=["roles"])
    data["full_name"] = member.full_name
    data["roles"] = [
        {
            "role": str(link.role_id),
            "name": link.role.name,
            "custom_hourly_rate": link.custom_hourly_rate,
            "default_hourly_rate": link.role.default_hourly_rate,
        }
        for link in member.member_roles.select_related("role")
    ]
    return data


def _save_member(payload, instance=None):
    roles = payload.pop("roles", None)
    form = bind_form(StaffMemberForm, payload, instance=instance)
    if not form.is_valid():
        return form_error(form)
    with transaction.atomic():
        member = form.save()
        if roles is not None:
            member.member_roles.all().delete()
            for raw in roles:
                role_id = raw.get("role") if isinstance(raw, dict) else raw
                if not is_valid_uuid(role_id) or not StaffRole.objects.filter(pk=role_id).exists():
                    raise BadRequest(f"Unknown role: {role_id}")
                StaffMemberRole.objects.create(
                    staff_member=member,
                    role_id=role_id,
                    custom_hourly_rate=raw.get("custom_hourly_rate") if isinstance(raw, dict) else None,
                )
    return JsonResponse(staff_member_payload(member), status=200 if instance else 201)


@api_view(["GET", "POST"])
def staff_members(request):
    if request.method == "POST":
        return _save_member(parse_json(request))
    qs = StaffMember.objects.all()
    if request.GET.get("all") != "1":
        qs = qs.filter(is_active=True)
    return JsonResponse([staff_member_payload(m) for m in qs], safe=False)


@api_view(["PUT", "DELETE"])
def staff_member_detail(request, pk):
    member = get_or_none(StaffMember, pk)
    if member is None:
        return not_found("Staff member")
    if request.method == "DELETE":
        member.is_active = False
        member.save(update_fields=["is_active", "updated_at"])
        logger.info("Staff member %s deactivated", member.pk)
        return JsonResponse({"success": True})
    return _save_member(parse_json(request), instance=member)


@api_view(["GET", "POST"])
def service_staff(request):
    if request.method == "POST":
        return _create(StaffAssignmentForm, parse_json(request), serializer=scheduling.assignment_payload)
    qs = StaffAssignment.objects.select_related("staff_member", "role")
    event_id = request.GET.get("eventId")
    proposal_id = request.GET.get("proposalId")
    for value in (event_id, proposal_id):
        if value and not is_valid_uuid(value):
            return error_response("Invalid id.")
    if event_id:
        qs = qs.filter(calendar_event_id=event_id)
    if proposal_id:
        qs = qs.filter(proposal_id=proposal_id)
    return JsonResponse([scheduling.assignment_payload(a) for a in qs], safe=False)


@api_view(["PUT", "DELETE"])
def service_staff_detail(request, pk):
    assignment = get_or_none(StaffAssignment, pk)
    if assignment is None:
        return not_found("Assignment")
    if request.method == "DELETE":
        assignment.delete()
        return JsonResponse({"success": True})
    return _update(
        StaffAssignmentForm, parse_json(request), assignment, serializer=scheduling.assignment_payload
    )


@api_view(["POST"])
def service_staff_clock(request, pk):
    """
    Clock in and/or out with wall-clock times (HH:MM) on the service date.
    """
    assignment = get_or_none(StaffAssignment, pk)
    if assignment is None:
        return not_found("Assignment")
    payload = parse_json(request)
    service_date = payload.get("serviceDate")
    start_time = payload.get("startTime") or None
    end_time = payload.get("endTime") or None
    if not service_date or not (start_time or end_time):
        return error_response("serviceDate and startTime or endTime are required.")
    try:
        staff.clock(assignment, service_date, start_time, end_time)
    except ValueError as exc:
        return error_response(f"Invalid date or time: {exc}")
    logger.info("Clocked assignment %s: %s h", assignment.pk, assignment.hours_worked)
    return JsonResponse(scheduling.assignment_payload(assignment))


@api_view(["GET"])
def staff_assignments(request):
    staff_id = request.GET.get("staffId")
    if not staff_id:
        return error_response("staffId parameter required")
    if not is_valid_uuid(staff_id):
        return error_response("Invalid id.")
    return JsonResponse(scheduling.assignments_for_staff(staff_id), safe=False)


@api_view(["GET"])
def staff_summary(request):
    month = request.GET.get("month")
    if not month:
        return error_response("month parameter required (YYYY-MM)")
    try:
        summary = scheduling.monthly_summary(month)
    except ValueError as exc:
        return error_response(str(exc))
    return JsonResponse(summary)


@api_view(["GET"])
def staff_upcoming(request):
    return JsonResponse(scheduling.upcoming_by_staff())
