"""Tests for placeholder substitution in paths."""
from glfast.models.template import TemplateParameters
from glfast.scaffold.paths import rename_path


def test_rename_every_token():
    params = TemplateParameters(name="hello-world-android")
    path = (
        "{{Name}}/src/{{Name_ToCamelCase}}/{{Name_ToPascalCase}}Activity.kt"
        ":{{Name_SkipFirstPart}}:{{Name_SkipLastPart}}:{{Name_SkipFirstAndLastPart}}"
    )
    assert rename_path(params, path) == (
        "hello-world-android/src/helloWorldAndroid/HelloWorldAndroidActivity.kt"
        ":worldAndroid:hello-world:world"
    )


def test_repeated_tokens_all_replaced():
    assert rename_path("billing-svc", "{{Name}}/{{Name}}.md") == "billing-svc/billing-svc.md"


def test_path_without_tokens_unchanged():
    assert rename_path("billing-svc", "src/main/App.java") == "src/main/App.java"


def test_unknown_placeholders_left_alone():
    assert rename_path("billing-svc", "{{Other}}/{{ .Name }}") == "{{Other}}/{{ .Name }}"


def test_substituted_values_are_not_rescanned():
    # A name that looks like a token must come out literally.
    assert rename_path("{{Name_ToPascalCase}}", "{{Name}}") == "{{Name_ToPascalCase}}"
