"""Tests for the encoding classifier."""
import warnings

import pytest

from glfast.models.config import TemplateSettings
from glfast.scaffold.classifier import Classification, EncodingClassifier
from glfast.scaffold.errors import ClassificationAmbiguity


class TestDefaultPolicy:
    """Classification with the built-in extension sets."""

    @pytest.mark.parametrize("path", [
        "main.go", "src/App.java", "app.py", "App.vue", "README.md", "index.html",
        "style.css", "app.js", "theme.scss", "package.json", "pom.xml",
        ".gitlab-ci.yml", "values.yaml", "Main.kt", "build.gradle",
    ])
    def test_template_extensions(self, path):
        assert EncodingClassifier().classify(path) is Classification.TEMPLATE

    @pytest.mark.parametrize("path", [
        "assets/logo.png", "libs/sdk.jar", "photo.jpg", "release.jks",
    ])
    def test_base64_extensions(self, path):
        assert EncodingClassifier().classify(path) is Classification.BASE64

    @pytest.mark.parametrize("path", ["Dockerfile", "deploy/Makefile"])
    def test_always_template_file_names(self, path):
        assert EncodingClassifier().classify(path) is Classification.TEMPLATE

    @pytest.mark.parametrize("path", ["LICENSE", "notes.txt", "go.sum", "Dockerfile.dev", "script.sh"])
    def test_unknown_extensions_are_text(self, path):
        assert EncodingClassifier().classify(path) is Classification.TEXT

    def test_extension_match_is_case_insensitive(self):
        classifier = EncodingClassifier()
        assert classifier.classify("LOGO.PNG") is Classification.BASE64
        assert classifier.classify("README.MD") is Classification.TEMPLATE

    def test_file_name_match_is_exact(self):
        assert EncodingClassifier().classify("dockerfile") is Classification.TEXT

    def test_classification_is_stable(self):
        classifier = EncodingClassifier()
        assert classifier.classify("a/b.jks") is classifier.classify("c/d.jks")


class TestConfiguredPolicy:
    """Classification built from configuration."""

    def test_base64_wins_over_template(self):
        classifier = EncodingClassifier(template_extensions=[".svg"], base64_extensions=[".svg"])
        assert classifier.classify("icon.svg") is Classification.BASE64

    def test_from_settings(self):
        settings = TemplateSettings(extensions=["tf"], base64_extensions=["ICO"], files=["Jenkinsfile"])
        classifier = EncodingClassifier.from_settings(settings)

        assert classifier.classify("main.tf") is Classification.TEMPLATE
        assert classifier.classify("favicon.ico") is Classification.BASE64
        assert classifier.classify("Jenkinsfile") is Classification.TEMPLATE
        # Replaced, not merged with the defaults
        assert classifier.classify("main.go") is Classification.TEXT
        assert classifier.classify("logo.png") is Classification.TEXT

    def test_empty_sets_make_everything_text(self):
        classifier = EncodingClassifier(template_extensions=[], base64_extensions=[], template_files=[])
        assert classifier.classify("main.go") is Classification.TEXT
        assert classifier.classify("logo.png") is Classification.TEXT

    def test_overlap_warns_at_configuration_time(self):
        with pytest.warns(ClassificationAmbiguity, match=".png"):
            TemplateSettings(extensions=[".md", ".png"])

    def test_no_warning_for_defaults(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            TemplateSettings()
