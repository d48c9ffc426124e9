"""Unit tests for the resource graph builder."""

import pytest

from blueprints.errors import DuplicateIdError, NotYetResolvedError, UnresolvedDependencyError
from blueprints.graph import Join, Reference, ResourceGraph, freeze, join, thaw


class TestResourceGraph:
    def setup_method(self):
        self.graph = ResourceGraph()
        self.bucket = self.graph.declare("AWS::S3::Bucket", "Bucket", {"versioned": True})

    def test_declare_returns_handle(self):
        assert self.bucket.logical_id == "Bucket"
        assert self.bucket.declared
        assert self.bucket.resource.kind == "AWS::S3::Bucket"
        assert "Bucket" in self.graph
        assert len(self.graph) == 1

    def test_duplicate_id_rejected(self):
        with pytest.raises(DuplicateIdError) as exc:
            self.graph.declare("AWS::S3::Bucket", "Bucket")
        assert exc.value.logical_id == "Bucket"
        assert len(self.graph) == 1

    def test_explicit_dependency_must_exist(self):
        with pytest.raises(UnresolvedDependencyError) as exc:
            self.graph.declare("AWS::CloudFront::Distribution", "Cdn", depends_on=["Missing"])
        assert exc.value.missing == ["Missing"]
        assert "Cdn" not in self.graph

    def test_reference_in_properties_is_a_dependency(self):
        cdn = self.graph.declare(
            "AWS::CloudFront::Distribution",
            "Cdn",
            {"origin": {"bucket": self.bucket.ref()}, "paths": [join(self.bucket.ref("arn"), "/*")]},
        )
        assert cdn.resource.depends_on == ("Bucket",)

    def test_reference_to_undeclared_resource_rejected(self):
        other = ResourceGraph()
        foreign = other.declare("AWS::S3::Bucket", "Elsewhere")
        with pytest.raises(UnresolvedDependencyError):
            self.graph.declare("AWS::S3::BucketPolicy", "Policy", {"bucket": foreign.ref()})

    def test_dependencies_are_deduplicated_in_order(self):
        self.graph.declare("AWS::CloudFront::OriginAccessControl", "OAC")
        cdn = self.graph.declare(
            "AWS::CloudFront::Distribution",
            "Cdn",
            {"a": self.bucket.ref(), "b": self.bucket.ref("arn")},
            depends_on=["OAC", "Bucket"],
        )
        assert cdn.resource.depends_on == ("OAC", "Bucket")

    def test_pending_handle_fails_until_declared(self):
        pending = self.graph.handle("Later")
        assert not pending.declared
        with pytest.raises(NotYetResolvedError):
            pending.ref("arn")

        self.graph.declare("AWS::SSM::Parameter", "Later")
        assert pending.ref("arn") == Reference("Later", "arn")

    def test_reference_is_stable(self):
        first = self.bucket.ref("arn")
        second = self.bucket.ref("arn")
        assert first == second
        assert str(first) == str(second) == "${Bucket.arn}"
        assert str(self.bucket.ref()) == "${Bucket}"

    def test_get_unknown_id(self):
        with pytest.raises(NotYetResolvedError):
            self.graph.get("Nope")

    def test_properties_are_read_only(self):
        props = {"rules": [{"id": "a"}]}
        handle = self.graph.declare("AWS::S3::Bucket", "Logs", props)
        props["rules"].append({"id": "b"})

        stored = handle.resource.properties
        assert stored["rules"] == ({"id": "a"},)
        with pytest.raises(TypeError):
            stored["rules"] = ()

    def test_traversal_is_declaration_order(self):
        self.graph.declare("AWS::CloudFront::OriginAccessControl", "OAC")
        self.graph.declare("AWS::CloudFront::Distribution", "Cdn", {"bucket": self.bucket.ref()})

        assert [r.logical_id for r in self.graph] == ["Bucket", "OAC", "Cdn"]
        assert [r.logical_id for r in self.graph.of_kind("AWS::CloudFront::Distribution")] == ["Cdn"]
        kinds = [kind for kind, _, _ in self.graph.declarations()]
        assert kinds == [
            "AWS::S3::Bucket",
            "AWS::CloudFront::OriginAccessControl",
            "AWS::CloudFront::Distribution",
        ]

    def test_every_dependency_precedes_its_dependent(self):
        self.graph.declare("AWS::CloudFront::OriginAccessControl", "OAC")
        self.graph.declare("AWS::CloudFront::Distribution", "Cdn", {"bucket": self.bucket.ref()}, ["OAC"])
        seen = set()
        for resource in self.graph:
            assert set(resource.depends_on) <= seen
            seen.add(resource.logical_id)


class TestJoinAndFreeze:
    def test_join_renders_parts(self):
        value = join("arn:aws:cloudfront::*:distribution/", Reference("Cdn", "id"))
        assert isinstance(value, Join)
        assert str(value) == "arn:aws:cloudfront::*:distribution/${Cdn.id}"
        assert value.references() == (Reference("Cdn", "id"),)

    def test_thaw_reverses_freeze(self):
        data = {"a": [1, {"b": [2, 3]}], "c": "d"}
        assert thaw(freeze(data)) == data
