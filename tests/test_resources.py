"""Tests for the Management API handlers and their shared pieces."""

import asyncio
import json
import socket
import ssl
import time

import httpx
import pytest

from shared.models import HandlerConfig, HandlerRequest
from resources import actions, applications, forms, logs, resource_servers
from resources.applications import (
    DeleteApplicationHandler,
    GetApplicationHandler,
    ListApplicationsHandler,
    SearchApplicationsHandler,
    UpdateApplicationHandler,
    search_query,
)
from resources.actions import CreateActionHandler, ListActionsHandler, UpdateActionHandler
from resources.base import INVALID_FORMAT, ListHandler
from resources.errors import (
    HttpErrorCategory,
    NetworkErrorKind,
    classify_network_error,
    classify_status,
    describe_http_failure,
)
from resources.forms import ListFormsHandler, PublishFormHandler
from resources.formatting import call_example, cell, markdown_table, pagination_hint
from resources.logs import ListLogsHandler, SearchLogsHandler, build_search_query
from resources.parsing import ListPage, ListShape, ShapeMismatch, as_count, parse_list_response
from resources.resource_servers import CreateResourceServerHandler, DeleteResourceServerHandler

DOMAIN = "tenant.us.auth0.com"
CONFIG = HandlerConfig(domain=DOMAIN)


def call(token="tok", **parameters) -> HandlerRequest:
    return HandlerRequest(token=token, parameters=parameters)


def reply(status=200, body=None) -> httpx.Response:
    if body is None:
        return httpx.Response(status)
    return httpx.Response(status, json=body)


class TestNetworkClassification:
    """Tests for transport failure classification."""

    def test_timeouts(self):
        assert classify_network_error(httpx.ReadTimeout("read timed out")) == NetworkErrorKind.TIMEOUT
        assert classify_network_error(asyncio.TimeoutError()) == NetworkErrorKind.TIMEOUT

    def test_dns_failure_from_cause(self):
        try:
            try:
                raise socket.gaierror(-2, "Name or service not known")
            except socket.gaierror as e:
                raise httpx.ConnectError("connect failed") from e
        except httpx.ConnectError as e:
            assert classify_network_error(e) == NetworkErrorKind.DNS_FAILURE

    def test_dns_failure_from_message(self):
        error = httpx.ConnectError("[Errno -3] Temporary failure in name resolution")
        assert classify_network_error(error) == NetworkErrorKind.DNS_FAILURE

    def test_connection_refused(self):
        assert classify_network_error(ConnectionRefusedError()) == NetworkErrorKind.CONNECTION_REFUSED
        error = httpx.ConnectError("[Errno 111] Connection refused")
        assert classify_network_error(error) == NetworkErrorKind.CONNECTION_REFUSED

    def test_connection_reset(self):
        assert classify_network_error(ConnectionResetError()) == NetworkErrorKind.CONNECTION_RESET
        error = httpx.RemoteProtocolError("Server disconnected without sending a response.")
        assert classify_network_error(error) == NetworkErrorKind.CONNECTION_RESET

    def test_tls(self):
        assert classify_network_error(ssl.SSLError("bad handshake")) == NetworkErrorKind.TLS_ERROR
        error = httpx.ConnectError("[SSL: CERTIFICATE_VERIFY_FAILED] certificate verify failed")
        assert classify_network_error(error) == NetworkErrorKind.TLS_ERROR

    def test_other(self):
        assert classify_network_error(httpx.ConnectError("boom")) == NetworkErrorKind.OTHER


class TestHttpFailures:
    """Tests for HTTP status classification and wording."""

    def test_classify_status(self):
        assert classify_status(401) == HttpErrorCategory.UNAUTHORIZED
        assert classify_status(403) == HttpErrorCategory.FORBIDDEN
        assert classify_status(404) == HttpErrorCategory.NOT_FOUND
        assert classify_status(409) == HttpErrorCategory.CONFLICT
        assert classify_status(422) == HttpErrorCategory.VALIDATION
        assert classify_status(429) == HttpErrorCategory.RATE_LIMITED
        assert classify_status(503) == HttpErrorCategory.SERVER_ERROR
        assert classify_status(418) == HttpErrorCategory.OTHER

    def test_unrecognized_status(self):
        message = describe_http_failure(418, "I'm a teapot", action="list things", scope="read:things")
        assert message == "Failed to list things: 418 I'm a teapot"

    def test_hint_overrides_generic_text(self):
        message = describe_http_failure(
            409, "Conflict", action="create resource server", scope="create:resource_servers",
            hints={409: "A resource server with this identifier already exists."}
        )
        assert "already exists" in message
        assert "in use" not in message

    def test_upstream_message_appended(self):
        message = describe_http_failure(
            400, "Bad Request", action="create form", scope="create:branding",
            body={"statusCode": 400, "message": "Payload validation error"}
        )
        assert message.endswith("Details: Payload validation error")

    def test_unauthorized_always_mentions_login(self):
        message = describe_http_failure(
            401, "Unauthorized", action="get log", scope="read:logs",
            hints={401: "Token rejected."}
        )
        assert "auth0 login" in message


class TestListParsing:
    """Tests for list response parsing."""

    def test_bare_array(self):
        page = parse_list_response([{"id": "1"}, {"id": "2"}], "clients", {"per_page": 5})
        assert isinstance(page, ListPage)
        assert page.shape == ListShape.BARE_ARRAY
        assert page.total == 2
        assert page.per_page == 5

    def test_paginated_object(self):
        page = parse_list_response(
            {"clients": [{"id": "1"}], "total": 12, "page": 1, "per_page": 5},
            "clients"
        )
        assert page.shape == ListShape.PAGINATED
        assert (page.total, page.page, page.per_page) == (12, 1, 5)
        assert page.total_pages == 3

    def test_start_and_limit(self):
        page = parse_list_response({"logs": [{"log_id": "a"}], "start": 20, "limit": 10, "total": 50}, "logs")
        assert page.page == 2
        assert page.per_page == 10

    def test_missing_key_is_a_mismatch(self):
        result = parse_list_response({"items": []}, "clients")
        assert isinstance(result, ShapeMismatch)
        assert '"clients"' in result.reason

    def test_scalar_is_a_mismatch(self):
        assert isinstance(parse_list_response("nope", "clients"), ShapeMismatch)
        assert isinstance(parse_list_response([1, 2], "clients"), ShapeMismatch)

    def test_as_count(self):
        assert as_count(5) == 5
        assert as_count(5.0) == 5
        assert as_count("7") == 7
        assert as_count(True) is None
        assert as_count(-1) is None
        assert as_count(2.5) is None


class TestFormatting:
    """Tests for markdown helpers."""

    def test_cell_escapes_pipes_and_newlines(self):
        assert cell("a|b\nc") == "a\\|b c"
        assert cell(None) == "-"
        assert cell(True) == "Yes"

    def test_table_has_one_line_per_row(self):
        table = markdown_table(["Name", "Type"], [["A", "spa"], ["B", None]])
        lines = table.strip().splitlines()
        assert len(lines) == 4
        assert lines[3] == "| B | - |"

    def test_call_example(self):
        assert call_example("auth0_list_logs", **{"from": "log1"}) == '`auth0_list_logs(from="log1")`'
        assert call_example("auth0_list_forms", type="login", page=2) == '`auth0_list_forms(type="login", page=2)`'

    def test_pagination_hint_on_last_page(self):
        hint = pagination_hint("auth0_list_applications", 2, 3, 5)
        assert "Page 3 of 3" in hint
        assert "To see more results" not in hint


class TestApplicationHandlers:
    """Tests for the application tools."""

    @pytest.mark.asyncio
    async def test_list_renders_rows_and_reference(self, fake_api):
        api = fake_api(lambda request: reply(body={
            "clients": [
                {"client_id": "abc", "name": "App1", "app_type": "spa",
                 "callbacks": ["https://app1.example.com/callback"]},
                {"client_id": "def", "name": "App2"},
            ],
            "total": 2, "page": 0, "per_page": 5,
        }))
        handler = ListApplicationsHandler(transport=api.transport)

        response = await handler.execute(call(), CONFIG)

        assert not response.is_error
        assert "### Auth0 Applications (2/2)" in response.text
        assert "| App1 | spa | - | app1.example.com |" in response.text
        assert "| App2 | Unknown | - | - |" in response.text
        assert "### Client IDs for Reference" in response.text
        assert "- **App1**: `abc`" in response.text

        request = api.requests[0]
        assert request.method == "GET"
        assert request.url.host == DOMAIN
        assert request.url.path == "/api/v2/clients"
        assert request.url.params["per_page"] == "5"
        assert request.url.params["include_totals"] == "true"
        assert request.headers["Authorization"] == "Bearer tok"

    @pytest.mark.asyncio
    async def test_list_zero_items(self, fake_api):
        api = fake_api(lambda request: reply(body={"clients": [], "total": 0}))
        handler = ListApplicationsHandler(transport=api.transport)

        response = await handler.execute(call(), CONFIG)

        assert not response.is_error
        assert response.text == "No applications found in the Auth0 tenant."

    @pytest.mark.asyncio
    async def test_list_pagination_hint(self, fake_api):
        clients = [{"client_id": f"id{i}", "name": f"App{i}"} for i in range(5)]
        api = fake_api(lambda request: reply(body={"clients": clients, "total": 12, "page": 0, "per_page": 5}))
        handler = ListApplicationsHandler(transport=api.transport)

        response = await handler.execute(call(), CONFIG)

        assert "(5/12)" in response.text
        assert "Page 1 of 3" in response.text
        assert "`auth0_list_applications(page=1, per_page=5)`" in response.text

    @pytest.mark.asyncio
    async def test_pagination_hint_keeps_page_size(self, fake_api):
        """The next-page call repeats a non-default page size."""
        clients = [{"client_id": f"id{i}", "name": f"App{i}"} for i in range(3)]
        api = fake_api(lambda request: reply(body={"clients": clients, "total": 12, "page": 0, "per_page": 3}))
        handler = ListApplicationsHandler(transport=api.transport)

        response = await handler.execute(call(per_page=3), CONFIG)

        assert api.requests[0].url.params["per_page"] == "3"
        assert "Page 1 of 4" in response.text
        assert "`auth0_list_applications(page=1, per_page=3)`" in response.text

    @pytest.mark.asyncio
    async def test_unexpected_shape_is_an_error(self, fake_api):
        api = fake_api(lambda request: reply(body={"unexpected": True}))
        handler = ListApplicationsHandler(transport=api.transport)

        response = await handler.execute(call(), CONFIG)

        assert response.is_error
        assert response.text.startswith(INVALID_FORMAT)

    @pytest.mark.asyncio
    async def test_invalid_json_is_an_error(self, fake_api):
        api = fake_api(lambda request: httpx.Response(200, content=b"<html>oops</html>"))
        handler = GetApplicationHandler(transport=api.transport)

        response = await handler.execute(call(client_id="abc"), CONFIG)

        assert response.is_error
        assert response.text == INVALID_FORMAT

    @pytest.mark.asyncio
    async def test_get_not_found_names_identifier(self, fake_api):
        api = fake_api(lambda request: reply(404, {"message": "The client does not exist"}))
        handler = GetApplicationHandler(transport=api.transport)

        response = await handler.execute(call(client_id="abc"), CONFIG)

        assert response.is_error
        assert "Application with client_id 'abc' not found." in response.text

    @pytest.mark.asyncio
    async def test_unauthorized_suggests_login(self, fake_api):
        api = fake_api(lambda request: reply(401, {"message": "Invalid token"}))
        handler = GetApplicationHandler(transport=api.transport)

        response = await handler.execute(call(client_id="abc"), CONFIG)

        assert response.is_error
        assert "401" in response.text
        assert "auth0 login" in response.text
        assert "Details: Invalid token" in response.text

    @pytest.mark.asyncio
    async def test_forbidden_names_scope(self, fake_api):
        api = fake_api(lambda request: reply(403))
        handler = ListApplicationsHandler(transport=api.transport)

        response = await handler.execute(call(), CONFIG)

        assert response.is_error
        assert "Forbidden" in response.text
        assert "read:clients" in response.text

    @pytest.mark.asyncio
    async def test_missing_parameter_sends_nothing(self, fake_api):
        api = fake_api(lambda request: reply(body={}))
        handler = GetApplicationHandler(transport=api.transport)

        response = await handler.execute(call(), CONFIG)

        assert response.is_error
        assert response.text == "Error: client_id is required"
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_missing_domain(self, fake_api):
        api = fake_api(lambda request: reply(body={}))
        handler = ListApplicationsHandler(transport=api.transport)

        response = await handler.execute(call(), HandlerConfig(domain=None))

        assert response.is_error
        assert response.text == "Error: AUTH0_DOMAIN environment variable is not set"
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_update_sends_only_provided_fields(self, fake_api):
        api = fake_api(lambda request: reply(body={"client_id": "abc", "name": "Renamed"}))
        handler = UpdateApplicationHandler(transport=api.transport)

        response = await handler.execute(call(client_id="abc", name="Renamed"), CONFIG)

        assert not response.is_error
        request = api.requests[0]
        assert request.method == "PATCH"
        assert request.url.path == "/api/v2/clients/abc"
        assert json.loads(request.content) == {"name": "Renamed"}

    @pytest.mark.asyncio
    async def test_delete_accepts_empty_body(self, fake_api):
        api = fake_api(lambda request: reply(204))
        handler = DeleteApplicationHandler(transport=api.transport)

        response = await handler.execute(call(client_id="abc"), CONFIG)

        assert not response.is_error
        assert "abc" in response.text

    @pytest.mark.asyncio
    async def test_identifier_is_url_encoded(self, fake_api):
        api = fake_api(lambda request: reply(body={"client_id": "a/b", "name": "x"}))
        handler = GetApplicationHandler(transport=api.transport)

        await handler.execute(call(client_id="a/b"), CONFIG)

        assert api.requests[0].url.raw_path.startswith(b"/api/v2/clients/a%2Fb")

    def test_search_query(self):
        assert search_query("myapp") == "name:myapp*"
        assert search_query("my app") == 'name:"my app"'

    @pytest.mark.asyncio
    async def test_search_applications(self, fake_api):
        api = fake_api(lambda request: reply(body={
            "clients": [{"client_id": "abc", "name": "Portal", "app_type": "spa"}],
            "total": 1,
        }))
        handler = SearchApplicationsHandler(transport=api.transport)

        response = await handler.execute(call(name="Port"), CONFIG)

        assert 'Auth0 Applications Matching "Port" (1/1)' in response.text
        params = api.requests[0].url.params
        assert params["q"] == "name:Port*"
        assert params["search_engine"] == "v3"
        assert params["per_page"] == "10"


class TestTimeouts:
    """Tests for the bounded HTTP call."""

    @pytest.mark.asyncio
    async def test_hanging_api_times_out(self, fake_api):
        async def hang(request):
            await asyncio.sleep(5)
            return reply(body={"clients": []})

        api = fake_api(hang)
        handler = ListApplicationsHandler(timeout=0.2, transport=api.transport)

        start = time.monotonic()
        response = await handler.execute(call(), CONFIG)

        assert time.monotonic() - start < 2
        assert response.is_error
        assert "timed out" in response.text

    @pytest.mark.asyncio
    async def test_connection_refused(self, fake_api):
        def refuse(request):
            raise httpx.ConnectError("[Errno 111] Connection refused", request=request)

        api = fake_api(refuse)
        handler = ListApplicationsHandler(transport=api.transport)

        response = await handler.execute(call(), CONFIG)

        assert response.is_error
        assert "connection refused" in response.text


class TestResourceServerHandlers:
    """Tests for the resource server tools."""

    @pytest.mark.asyncio
    async def test_create_conflict(self, fake_api):
        api = fake_api(lambda request: reply(409, {"message": "Resource server already exists"}))
        handler = CreateResourceServerHandler(transport=api.transport)

        response = await handler.execute(
            call(name="API", identifier="https://api.example.com"), CONFIG
        )

        assert response.is_error
        assert "A resource server with this identifier already exists." in response.text

    @pytest.mark.asyncio
    async def test_delete_forbidden_mentions_management_api(self, fake_api):
        api = fake_api(lambda request: reply(403))
        handler = DeleteResourceServerHandler(transport=api.transport)

        response = await handler.execute(call(id="rs1"), CONFIG)

        assert "Management API" in response.text


class TestActionHandlers:
    """Tests for the action tools."""

    @pytest.mark.asyncio
    async def test_list_maps_trigger_filter(self, fake_api):
        api = fake_api(lambda request: reply(body={"actions": [], "total": 0}))
        handler = ListActionsHandler(transport=api.transport)

        await handler.execute(call(trigger_id="post-login"), CONFIG)

        params = api.requests[0].url.params
        assert params["triggerId"] == "post-login"
        assert "trigger_id" not in params

    @pytest.mark.asyncio
    async def test_create_defaults(self, fake_api):
        api = fake_api(lambda request: reply(201, {"id": "act1", "name": "Greeter"}))
        handler = CreateActionHandler(transport=api.transport)

        response = await handler.execute(
            call(name="Greeter", trigger_id="post-login", code="exports.onExecutePostLogin = async () => {};"),
            CONFIG
        )

        assert not response.is_error
        body = json.loads(api.requests[0].content)
        assert body["supported_triggers"] == [{"id": "post-login", "version": "v2"}]
        assert body["runtime"] == "node18"
        assert "auth0_deploy_action" in response.text

    @pytest.mark.asyncio
    async def test_partial_secret_failure_is_reported(self, fake_api):
        """The update succeeds while each secret result is listed."""
        def respond(request):
            if request.url.path.endswith("/secrets"):
                secret = json.loads(request.content)["secrets"][0]
                if secret["name"] == "BAD":
                    return reply(400, {"message": "Invalid secret value"})
                return reply(200, {})
            return reply(200, {"id": "act1", "name": "Greeter"})

        api = fake_api(respond)
        handler = UpdateActionHandler(transport=api.transport)

        response = await handler.execute(
            call(id="act1", code="x", secrets=[
                {"name": "GOOD", "value": "1"},
                {"name": "BAD", "value": "2"},
            ]),
            CONFIG
        )

        assert not response.is_error
        assert "Action Updated Successfully" in response.text
        assert "Updated: `GOOD`" in response.text
        assert "- `BAD`: 400 Bad Request (Invalid secret value)" in response.text
        assert [r.url.path for r in api.requests] == [
            "/api/v2/actions/actions/act1",
            "/api/v2/actions/actions/act1/secrets",
            "/api/v2/actions/actions/act1/secrets",
        ]

    @pytest.mark.asyncio
    async def test_failed_update_skips_secrets(self, fake_api):
        api = fake_api(lambda request: reply(404))
        handler = UpdateActionHandler(transport=api.transport)

        response = await handler.execute(call(id="act1", secrets=[{"name": "S", "value": "v"}]), CONFIG)

        assert response.is_error
        assert len(api.requests) == 1


class TestLogHandlers:
    """Tests for the log tools."""

    def test_build_search_query(self):
        query = build_search_query({"user_id": "auth0|1", "type": "f", "from": "2024-01-01"})
        assert query == 'user_id:"auth0|1" AND type:"f" AND date:[2024-01-01 TO *]'
        assert build_search_query({}) is None

    @pytest.mark.asyncio
    async def test_checkpoint_hint(self, fake_api):
        logs = [{"log_id": f"log{i}", "type": "s", "date": "2024-01-01T00:00:00.000Z"} for i in range(10)]
        api = fake_api(lambda request: reply(body=logs))
        handler = ListLogsHandler(transport=api.transport)

        response = await handler.execute(call(**{"from": "log0"}), CONFIG)

        assert not response.is_error
        assert '`auth0_list_logs(from="log9")`' in response.text
        params = api.requests[0].url.params
        assert params["from"] == "log0"
        assert params["take"] == "10"
        assert params["sort"] == "date:-1"
        assert "include_totals" not in params

    @pytest.mark.asyncio
    async def test_checkpoint_hint_keeps_take(self, fake_api):
        logs = [{"log_id": f"log{i}", "type": "s"} for i in range(3)]
        api = fake_api(lambda request: reply(body=logs))
        handler = ListLogsHandler(transport=api.transport)

        response = await handler.execute(call(take=3, **{"from": "log0"}), CONFIG)

        assert '`auth0_list_logs(from="log2", take=3)`' in response.text

    @pytest.mark.asyncio
    async def test_take_is_capped(self, fake_api):
        api = fake_api(lambda request: reply(body=[]))
        handler = ListLogsHandler(transport=api.transport)

        response = await handler.execute(call(take=500), CONFIG)

        assert api.requests[0].url.params["take"] == "100"
        assert response.text == "No logs found in the Auth0 tenant."

    @pytest.mark.asyncio
    async def test_search_sends_query(self, fake_api):
        api = fake_api(lambda request: reply(body={
            "logs": [{"log_id": "l1", "type": "f", "description": "Wrong password"}],
            "total": 30, "start": 0, "limit": 10,
        }))
        handler = SearchLogsHandler(transport=api.transport)

        response = await handler.execute(call(type="f"), CONFIG)

        assert api.requests[0].url.params["q"] == 'type:"f"'
        assert "**Search criteria**" in response.text
        assert '`auth0_search_logs(type="f", page=1, per_page=10)`' in response.text


class TestFormHandlers:
    """Tests for the form tools."""

    @pytest.mark.asyncio
    async def test_list_filters_by_type(self, fake_api):
        api = fake_api(lambda request: reply(body={"forms": [], "total": 0}))
        handler = ListFormsHandler(transport=api.transport)

        response = await handler.execute(call(type="signup"), CONFIG)

        assert api.requests[0].url.params["type"] == "signup"
        assert "signup" in response.text

    @pytest.mark.asyncio
    async def test_publish(self, fake_api):
        api = fake_api(lambda request: reply(body={"id": "f1", "name": "Signup", "is_published": True}))
        handler = PublishFormHandler(transport=api.transport)

        response = await handler.execute(call(id="f1"), CONFIG)

        assert not response.is_error
        assert api.requests[0].method == "POST"
        assert api.requests[0].url.path == "/api/v2/branding/forms/f1/publish"
        assert "Form Published Successfully" in response.text

    @pytest.mark.asyncio
    async def test_publish_validation_error(self, fake_api):
        api = fake_api(lambda request: reply(422))
        handler = PublishFormHandler(transport=api.transport)

        response = await handler.execute(call(id="f1"), CONFIG)

        assert response.is_error
        assert "cannot be published" in response.text


ALL_HANDLERS = [
    *applications.HANDLERS,
    *resource_servers.HANDLERS,
    *actions.HANDLERS,
    *logs.HANDLERS,
    *forms.HANDLERS,
]
ID_HANDLERS = [handler for handler in ALL_HANDLERS if handler.id_param]
LIST_HANDLERS = [handler for handler in ALL_HANDLERS if issubclass(handler, ListHandler)]


def required_arguments(handler_class) -> dict:
    return {name: f"{name}-1" for name in handler_class.required}


def handler_id(handler_class) -> str:
    return handler_class.tool.name.value


class TestEveryHandler:
    """Behavior shared by all handlers."""

    def test_catalog_is_complete(self):
        assert len(ALL_HANDLERS) == 26

    @pytest.mark.parametrize("handler_class", ALL_HANDLERS, ids=handler_id)
    @pytest.mark.asyncio
    async def test_unauthorized_suggests_login(self, fake_api, handler_class):
        api = fake_api(lambda request: reply(401, {"message": "Invalid token"}))
        handler = handler_class(transport=api.transport)

        response = await handler.execute(call(**required_arguments(handler_class)), CONFIG)

        assert response.is_error
        assert "auth0 login" in response.text
        assert len(api.requests) == 1

    @pytest.mark.parametrize("handler_class", ID_HANDLERS, ids=handler_id)
    @pytest.mark.asyncio
    async def test_not_found_names_identifier(self, fake_api, handler_class):
        api = fake_api(lambda request: reply(404))
        handler = handler_class(transport=api.transport)
        arguments = required_arguments(handler_class)

        response = await handler.execute(call(**arguments), CONFIG)

        assert response.is_error
        identifier = arguments[handler_class.id_param]
        assert response.text.startswith(
            f"{handler_class.resource_label} with {handler_class.id_param} '{identifier}' not found."
        )

    @pytest.mark.parametrize("handler_class", ID_HANDLERS, ids=handler_id)
    @pytest.mark.asyncio
    async def test_missing_identifier(self, fake_api, handler_class):
        api = fake_api(lambda request: reply(200, {}))
        handler = handler_class(transport=api.transport)
        arguments = required_arguments(handler_class)
        del arguments[handler_class.id_param]

        response = await handler.execute(call(**arguments), CONFIG)

        assert response.is_error
        assert response.text == f"Error: {handler_class.id_param} is required"
        assert api.requests == []

    @pytest.mark.parametrize("handler_class", LIST_HANDLERS, ids=handler_id)
    @pytest.mark.asyncio
    async def test_bare_array_is_rendered(self, fake_api, handler_class):
        item = {
            "id": "item1", "client_id": "item1", "log_id": "item1",
            "name": "Item One", "description": "Item One",
        }
        api = fake_api(lambda request: reply(body=[item]))
        handler = handler_class(transport=api.transport)

        response = await handler.execute(call(**required_arguments(handler_class)), CONFIG)

        assert not response.is_error
        assert "Item One" in response.text
        assert "To see more" not in response.text

    @pytest.mark.parametrize("handler_class", LIST_HANDLERS, ids=handler_id)
    @pytest.mark.asyncio
    async def test_empty_list_message(self, fake_api, handler_class):
        api = fake_api(lambda request: reply(body={handler_class.list_key: [], "total": 0}))
        handler = handler_class(transport=api.transport)
        arguments = required_arguments(handler_class)

        response = await handler.execute(call(**arguments), CONFIG)

        assert not response.is_error
        assert response.text == handler.empty_text(arguments)
        assert response.text.startswith("No ")
