"""Architecture tests for the IAM bounded context.

These tests enforce the layering inside IAM: the domain is pure, the
application layer depends on ports rather than infrastructure, and the
shared kernel and cross-cutting infrastructure never reach back into IAM.
"""

from pytest_archon import archrule


class TestIAMDomainLayerBoundaries:
    """The IAM domain contains only business rules."""

    def test_domain_does_not_import_infrastructure(self):
        (
            archrule("iam_domain_no_infrastructure")
            .match("iam.domain*")
            .should_not_import("iam.infrastructure*", "infrastructure*")
            .check("iam")
        )

    def test_domain_does_not_import_application(self):
        (
            archrule("iam_domain_no_application")
            .match("iam.domain*")
            .should_not_import("iam.application*")
            .check("iam")
        )

    def test_domain_does_not_import_frameworks(self):
        """Domain objects should be framework-agnostic."""
        (
            archrule("iam_domain_no_frameworks")
            .match("iam.domain*")
            .should_not_import("fastapi*", "starlette*", "sqlalchemy*")
            .check("iam")
        )


class TestIAMApplicationLayerBoundaries:
    """Application services depend on ports, never on adapters."""

    def test_application_does_not_import_infrastructure(self):
        """Tenant resolution and membership go through repository and cache ports."""
        (
            archrule("iam_application_no_infrastructure")
            .match("iam.application*")
            .should_not_import("iam.infrastructure*", "infrastructure.database*")
            .check("iam")
        )

    def test_application_does_not_import_presentation(self):
        (
            archrule("iam_application_no_presentation")
            .match("iam.application*")
            .should_not_import("iam.presentation*", "iam.dependencies*", "fastapi*")
            .check("iam")
        )


class TestIAMPortsLayerBoundaries:
    def test_ports_does_not_import_infrastructure(self):
        (
            archrule("iam_ports_no_infrastructure")
            .match("iam.ports*")
            .should_not_import("iam.infrastructure*", "iam.application*")
            .check("iam")
        )


class TestIAMBoundedContextIsolation:
    """IAM does not depend on the registrar bounded context."""

    def test_iam_does_not_import_registrar(self):
        (
            archrule("iam_no_registrar")
            .match("iam*")
            .should_not_import("registrar*")
            .check("iam")
        )
