"""API resource tests."""

from uuid import uuid4

from falcon.testing import TestClient

from authzcore.domain.value_objects import CollaboratorRole

from tests.conftest import FakeGrantStore, allow, deny, make_policy

RESOURCE = "arn:monkeys:iam:org1:resource/123"
PRINCIPAL = {"id": "user-1", "type": "user", "organization_id": "org1"}
ORG_HEADER = {"X-Organization-Id": "org1"}


class TestCheck:
    def test_allowed(self, client: TestClient, store: FakeGrantStore) -> None:
        store.grant(make_policy(allow("resource:Read", "*"), name="readers"))

        result = client.simulate_post(
            "/v1/authz/check",
            json={"principal": PRINCIPAL, "action": "resource:Read", "resource": RESOURCE},
        )

        assert result.status_code == 200
        assert result.json["allowed"] is True
        assert result.json["effect"] == "Allow"
        assert result.json["matched"][0]["policy_name"] == "readers"
        assert result.json["matched"][0]["source"] == "role"

    def test_explicit_deny(self, client: TestClient, store: FakeGrantStore) -> None:
        store.grant(make_policy(allow("resource:*", "*"), deny("resource:Delete", "*")))

        result = client.simulate_post(
            "/v1/authz/check",
            json={"principal": PRINCIPAL, "action": "resource:Delete", "resource": RESOURCE},
        )

        assert result.status_code == 200
        assert result.json["allowed"] is False
        assert result.json["reason"] == "explicit deny"

    def test_organization_from_header(self, client: TestClient, store: FakeGrantStore) -> None:
        store.grant(make_policy(allow("resource:Read", "*")))

        result = client.simulate_post(
            "/v1/authz/check",
            json={"principal": {"id": "user-1"}, "action": "resource:Read", "resource": "resource/1"},
            headers=ORG_HEADER,
        )

        assert result.status_code == 200
        assert result.json["allowed"] is True

    def test_missing_organization(self, client: TestClient) -> None:
        result = client.simulate_post(
            "/v1/authz/check",
            json={"principal": {"id": "user-1"}, "action": "resource:Read", "resource": RESOURCE},
        )

        assert result.status_code == 400
        assert result.json["error"] == "organization_id is required"

    def test_missing_action(self, client: TestClient) -> None:
        result = client.simulate_post(
            "/v1/authz/check", json={"principal": PRINCIPAL, "resource": RESOURCE}
        )

        assert result.status_code == 400
        assert "action" in result.json["error"]

    def test_content_overlay(self, client: TestClient, store: FakeGrantStore) -> None:
        store.add_collaborator("42", "user-1", CollaboratorRole.CO_AUTHOR)

        result = client.simulate_post(
            "/v1/authz/check",
            json={
                "principal": PRINCIPAL,
                "action": "content:Update",
                "resource": "arn:monkeys:cms:org1:content/42",
            },
        )

        assert result.json["allowed"] is True
        assert result.json["collaborator_role"] == "co-author"


class TestSimulate:
    def test_trace(self, client: TestClient, store: FakeGrantStore) -> None:
        store.grant(
            make_policy(
                allow("resource:Read", "*"),
                deny("resource:Read", "*", {"Bool": {"suspended": "true"}}),
            )
        )

        result = client.simulate_post(
            "/v1/authz/simulate",
            json={
                "principal": PRINCIPAL,
                "action": "resource:Read",
                "resource": RESOURCE,
                "context": {"suspended": False},
            },
        )

        assert result.status_code == 200
        assert result.json["decision"]["allowed"] is True
        assert result.json["path"] == "policy"
        assert [t["outcome"] for t in result.json["trace"]] == ["matched", "condition not met"]

    def test_document_dry_run(self, client: TestClient) -> None:
        result = client.simulate_post(
            "/v1/authz/simulate-document",
            json={
                "document": {"Statement": [allow("resource:Read", "*")]},
                "test_cases": [
                    {"name": "read", "action": "resource:Read", "resource": RESOURCE, "expected": "allow"},
                    {"name": "write", "action": "resource:Write", "resource": RESOURCE, "expected": "allow"},
                ],
            },
        )

        assert result.status_code == 200
        assert result.json["valid"] is True
        assert [r["passed"] for r in result.json["results"]] == [True, False]
        assert result.json["results"][1]["actual"] == "Deny"

    def test_document_dry_run_invalid_document(self, client: TestClient) -> None:
        result = client.simulate_post(
            "/v1/authz/simulate-document", json={"document": {"Statement": "x"}}
        )

        assert result.status_code == 200
        assert result.json["valid"] is False
        assert result.json["errors"]

    def test_document_dry_run_bad_expectation(self, client: TestClient) -> None:
        result = client.simulate_post(
            "/v1/authz/simulate-document",
            json={
                "document": {"Statement": []},
                "test_cases": [{"action": "a:B", "resource": "*", "expected": "maybe"}],
            },
        )

        assert result.status_code == 400


class TestBulkCheck:
    def test_results_in_order(self, client: TestClient, store: FakeGrantStore) -> None:
        store.grant(make_policy(allow("resource:Read", "*")))

        result = client.simulate_post(
            "/v1/authz/bulk-check",
            json={
                "principal": PRINCIPAL,
                "checks": [
                    {"action": "resource:Read", "resource": RESOURCE},
                    {"action": "resource:Delete", "resource": RESOURCE},
                ],
            },
        )

        assert result.status_code == 200
        assert [(r["action"], r["allowed"]) for r in result.json["results"]] == [
            ("resource:Read", True),
            ("resource:Delete", False),
        ]

    def test_too_many_checks(self, client: TestClient) -> None:
        checks = [{"action": "resource:Read", "resource": RESOURCE}] * 6

        result = client.simulate_post(
            "/v1/authz/bulk-check", json={"principal": PRINCIPAL, "checks": checks}
        )

        assert result.status_code == 400


class TestEffectivePermissions:
    def test_within_resource(self, client: TestClient, store: FakeGrantStore) -> None:
        store.grant(make_policy(allow("resource:*", "*"), deny("resource:Delete", "*")))

        result = client.simulate_get(
            "/v1/principals/user/user-1/effective-permissions",
            params={"resource": RESOURCE},
            headers=ORG_HEADER,
        )

        assert result.status_code == 200
        assert result.json == {"resource": RESOURCE, "actions": ["resource:Read", "resource:Write"]}

    def test_grouped(self, client: TestClient, store: FakeGrantStore) -> None:
        store.grant(make_policy(allow("resource:Read", "arn:monkeys:iam:org1:resource/*"), name="readers"))

        result = client.simulate_get(
            "/v1/principals/user/user-1/effective-permissions",
            params={"organization_id": "org1"},
        )

        assert result.status_code == 200
        (item,) = result.json["items"]
        assert item["resource"] == "arn:monkeys:iam:org1:resource/*"
        assert item["sources"] == ["readers"]

    def test_unknown_principal_type(self, client: TestClient) -> None:
        result = client.simulate_get(
            "/v1/principals/robot/r-1/effective-permissions", headers=ORG_HEADER
        )

        assert result.status_code == 400


class TestPolicies:
    def test_validate(self, client: TestClient) -> None:
        valid = client.simulate_post(
            "/v1/policies/validate",
            json={"document": {"Version": "2024-01-01", "Statement": [allow("a:B", "*")]}},
        )
        invalid = client.simulate_post(
            "/v1/policies/validate", json={"document": {"Statement": [{"Effect": "Allow"}]}}
        )

        assert valid.status_code == 200
        assert valid.json == {"valid": True, "version": "2024-01-01", "statements": 1}
        assert invalid.status_code == 400
        assert invalid.json["valid"] is False

    def test_update_document(self, client: TestClient, store: FakeGrantStore) -> None:
        policy = store.add_policy(make_policy(allow("resource:Read", "*")))

        result = client.simulate_put(
            f"/v1/policies/{policy.id}/document",
            json={"document": {"Statement": [allow("resource:Write", "*")]}},
        )

        assert result.status_code == 200
        assert result.json == {"id": str(policy.id), "version": "1.0.1"}

    def test_update_unknown_policy(self, client: TestClient) -> None:
        result = client.simulate_put(
            f"/v1/policies/{uuid4()}/document",
            json={"document": {"Statement": [allow("resource:Write", "*")]}},
        )

        assert result.status_code == 404

    def test_delete_system_policy_conflict(self, client: TestClient, store: FakeGrantStore) -> None:
        policy = store.add_policy(make_policy(allow("*", "*"), is_system_policy=True))

        result = client.simulate_delete(f"/v1/policies/{policy.id}")

        assert result.status_code == 409
        assert policy.id in store.policies

    def test_delete_policy(self, client: TestClient, store: FakeGrantStore) -> None:
        policy = store.add_policy(make_policy(allow("resource:Read", "*")))

        result = client.simulate_delete(f"/v1/policies/{policy.id}")

        assert result.status_code == 204
        assert policy.id not in store.policies

    def test_delete_invalid_id(self, client: TestClient) -> None:
        assert client.simulate_delete("/v1/policies/not-a-uuid").status_code == 400

    def test_attach_and_detach(self, client: TestClient, store: FakeGrantStore) -> None:
        role = store.add_role()
        policy = store.add_policy(make_policy(allow("resource:Read", "*")))
        path = f"/v1/roles/{role.id}/policies/{policy.id}"

        attached = client.simulate_put(path, json={"attached_by": "admin-1"})
        detached = client.simulate_delete(path)
        again = client.simulate_delete(path)

        assert attached.status_code == 204
        assert detached.status_code == 204
        assert again.status_code == 404

    def test_attach_unknown_role(self, client: TestClient, store: FakeGrantStore) -> None:
        policy = store.add_policy(make_policy(allow("resource:Read", "*")))

        result = client.simulate_put(f"/v1/roles/{uuid4()}/policies/{policy.id}")

        assert result.status_code == 404
