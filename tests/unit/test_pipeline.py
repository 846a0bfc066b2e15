"""
Unit tests for the request pipeline and its builder.
"""

import json

import pytest
from django.http import HttpResponse
from django.test import RequestFactory

from django_restify.exceptions import AccessConfigurationError, ConfigurationError
from django_restify.http.handlers import default_error_handler, get_status_code
from django_restify.options import build_options
from django_restify.pipeline import (
    ConditionalStage,
    PipelineBuilder,
    RequestContext,
    RequestPipeline,
    Stage,
)
from django_restify.pipeline.steps import ContextFilterStage, HookStage
from django_restify.pipeline.steps.execution import make_shallow
from test_app.models import Person

pytestmark = pytest.mark.unit


class RecordingStage(Stage):
    def __init__(self, name, calls, error=None):
        self.name = name
        self.calls = calls
        self.error = error

    def execute(self, ctx):
        self.calls.append(self.name)
        if self.error is not None:
            raise self.error
        return ctx


def _context(options=None, operation="get_items"):
    return RequestContext(
        request=RequestFactory().get("/api/v1/Person"),
        model=Person,
        model_name="Person",
        registry=None,
        options=options or build_options("Person"),
        operation=operation,
    )


def test_stages_run_in_order():
    calls = []
    pipeline = RequestPipeline([RecordingStage("a", calls), RecordingStage("b", calls)])

    pipeline.execute(_context())

    assert calls == ["a", "b"]
    assert pipeline.get_stage_names() == ["a", "b"]


def test_first_error_short_circuits_to_error_handler():
    calls = []
    handled = []
    error = AccessConfigurationError("admin")
    pipeline = RequestPipeline(
        [
            RecordingStage("access", calls, error=error),
            RecordingStage("storage", calls),
        ],
        error_handler=lambda exc, ctx: handled.append(exc) or "error-response",
    )

    ctx = pipeline.execute(_context())

    assert calls == ["access"]
    assert handled == [error]
    assert ctx.error is error
    assert ctx.response == "error-response"


def test_conditional_stage():
    calls = []
    pipeline = RequestPipeline(
        [
            ConditionalStage(RecordingStage("skipped", calls), lambda ctx: False),
            ConditionalStage(RecordingStage("run", calls), lambda ctx: True),
        ]
    )

    pipeline.execute(_context())

    assert calls == ["run"]


def test_hook_response_stops_pipeline():
    calls = []
    options = build_options("Person", {"pre_read": lambda ctx: HttpResponse(status=418)})
    pipeline = RequestPipeline([HookStage("pre_read"), RecordingStage("storage", calls)])

    ctx = pipeline.execute(_context(options))

    assert calls == []
    assert ctx.response.status_code == 418
    assert ctx.error is None


def test_context_filter_must_call_done():
    options = build_options("Person", {"context_filter": lambda queryset, request, done: None})

    with pytest.raises(ConfigurationError):
        ContextFilterStage().execute(_context(options))


def test_builder_stage_order():
    builder = PipelineBuilder(build_options("Person"))

    assert builder.build("get_items").get_stage_names() == [
        "setup_context",
        "prepare_query",
        "context_filter",
        "hooks:pre_middleware",
        "hooks:pre_read",
        "read_access",
        "get_items",
        "hooks:post_read",
        "conditional:prepare_output",
        "emit",
    ]
    assert builder.build("create_object").get_stage_names()[:4] == [
        "setup_context",
        "parse_body",
        "write_access",
        "prepare_input",
    ]
    delete_stages = builder.build("delete_item").get_stage_names()
    assert "read_access" not in delete_stages
    assert "find_document" not in delete_stages


def test_builder_fetches_documents_when_find_and_modify_is_disabled():
    options = build_options("Person", {"findOneAndUpdate": False, "findOneAndRemove": False})
    builder = PipelineBuilder(options)

    assert "find_document" in builder.build("modify_object", "patch").get_stage_names()
    assert "find_document" in builder.build("delete_item").get_stage_names()


def test_builder_custom_and_skipped_stages():
    calls = []
    builder = PipelineBuilder(build_options("Person"))
    builder.add_stage(RecordingStage("audit", calls)).skip_stage("hooks:pre_middleware")

    names = builder.build("get_count").get_stage_names()

    assert names[-2:] == ["audit", "emit"]
    assert "hooks:pre_middleware" not in names
    assert "conditional:prepare_output" not in names


def test_builder_rejects_unknown_operation():
    with pytest.raises(ValueError):
        PipelineBuilder(build_options("Person")).build("upsert")


def test_make_shallow():
    assert make_shallow({"a": 1, "b": {"c": 2}, "d": [1]}) == {"a": 1, "b": True, "d": True}


def test_status_codes():
    assert get_status_code(AccessConfigurationError("admin")) == 500
    assert get_status_code(RuntimeError("boom")) == 500
    assert get_status_code(Person.DoesNotExist()) == 404


def test_error_body_shapes():
    ctx = _context()
    error = AccessConfigurationError("admin")

    default_body = json.loads(default_error_handler(False)(error, ctx).content)
    restify_body = json.loads(default_error_handler(True)(error, ctx).content)

    assert default_body["name"] == "AccessConfigurationError"
    assert default_body["message"].startswith("Unsupported access")
    assert restify_body == {"code": "unsupported_access", "message": error.message}
    assert ctx.status_code == 500
