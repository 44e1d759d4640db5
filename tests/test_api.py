"""HTTP surface: auth, session flags, the invite flow and error shapes."""

import pytest

OWNER = {"email": "owner@acme-legal.com", "password": "secret123"}


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def sign_up(client, email=OWNER["email"], password=OWNER["password"]) -> str:
    resp = await client.post(
        "/signup",
        json={
            "email": email,
            "password": password,
            "organization": {"name": "Acme Legal", "hq_location": "New York, NY"},
        },
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["access_token"]


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_signup_login_and_session(client):
    token = await sign_up(client)

    me = await client.get("/me", headers=bearer(token))
    assert me.status_code == 200
    session = me.json()
    assert session["is_org_admin"] is True
    assert session["is_branch_admin"] is False
    assert session["needs_onboarding"] is False
    assert session["organization"]["name"] == "Acme Legal"
    assert "offices" in session["permitted_views"]

    login = await client.post(
        "/login", data={"username": OWNER["email"], "password": OWNER["password"]}
    )
    assert login.status_code == 200
    assert login.json()["user"]["email"] == OWNER["email"]


@pytest.mark.asyncio
async def test_bad_credentials_and_missing_token(client):
    await sign_up(client)
    bad = await client.post("/login", data={"username": OWNER["email"], "password": "wrong-pass"})
    assert bad.status_code == 401

    anonymous = await client.get("/me")
    assert anonymous.status_code == 401


@pytest.mark.asyncio
async def test_duplicate_signup_is_a_conflict(client):
    await sign_up(client)
    resp = await client.post(
        "/signup",
        json={
            "email": OWNER["email"],
            "password": "another-pass",
            "organization": {"name": "Acme Again", "hq_location": "Boston, MA"},
        },
    )
    assert resp.status_code == 409
    assert "detail" in resp.json()


@pytest.mark.asyncio
async def test_invited_branch_admin_creates_vendor_in_their_branch(client, email_sender):
    owner = bearer(await sign_up(client))

    office = await client.post(
        "/branch-offices", json={"identifier": "NYC-01", "location": "New York, NY"}, headers=owner
    )
    assert office.status_code == 201, office.text
    nyc_id = office.json()["id"]

    created = await client.post(
        f"/branch-offices/{nyc_id}/invites",
        json={"email": "branch.admin@acme-legal.com", "role": "branch_admin", "full_name": "Dana Reyes"},
        headers=owner,
    )
    assert created.status_code == 201, created.text
    invite = created.json()
    assert invite["email_sent"] is True
    assert invite["status"] == "pending"
    assert "invite_token" not in invite
    token = invite["invite_link"].rsplit("/", 1)[-1]
    assert email_sender.sent[0]["invite_link"] == invite["invite_link"]

    details = await client.get(f"/invites/token/{token}")
    assert details.status_code == 200
    assert details.json()["branch_identifier"] == "NYC-01"
    assert details.json()["organization_name"] == "Acme Legal"

    accepted = await client.post(f"/invites/token/{token}/accept", json={"password": "branch-pass"})
    assert accepted.status_code == 200, accepted.text
    admin = bearer(accepted.json()["access_token"])

    me = (await client.get("/me", headers=admin)).json()
    assert me["is_branch_admin"] is True
    assert me["is_org_admin"] is False
    assert me["branch_office_id"] == nyc_id
    assert "departments" in me["permitted_views"]
    assert "offices" not in me["permitted_views"]

    vendor = await client.post(
        "/vendors", json={"name": "Hudson Couriers", "tin": "12-3456789"}, headers=admin
    )
    assert vendor.status_code == 201, vendor.text
    assert vendor.json()["branch_office_id"] == nyc_id

    again = await client.post(f"/invites/token/{token}/accept", json={"password": "branch-pass"})
    assert again.status_code == 409
    assert again.json() == {"detail": "This invitation has already been accepted."}

    listed = await client.get(f"/branch-offices/{nyc_id}/invites", headers=owner)
    assert listed.json()[0]["status"] == "accepted"
    assert listed.json()[0]["invite_link"] is None


@pytest.mark.asyncio
async def test_error_shapes(client):
    owner = bearer(await sign_up(client))

    missing = await client.get("/invites/token/does-not-exist")
    assert missing.status_code == 404
    assert missing.json() == {"detail": "This invitation could not be found or has been revoked."}

    not_found = await client.patch("/vendors/does-not-exist", json={"notes": "x"}, headers=owner)
    assert not_found.status_code == 404
    assert not_found.json() == {"detail": "Vendor not found"}

    office = await client.post(
        "/branch-offices", json={"identifier": "NYC-01", "location": "New York, NY"}, headers=owner
    )
    invite = await client.post(
        f"/branch-offices/{office.json()['id']}/invites",
        json={"email": "clerk@acme-legal.com", "role": "branch_user"},
        headers=owner,
    )
    token = invite.json()["invite_link"].rsplit("/", 1)[-1]
    clerk = bearer(
        (await client.post(f"/invites/token/{token}/accept", json={"password": "clerk-pass"})).json()[
            "access_token"
        ]
    )

    forbidden = await client.post(
        "/branch-offices", json={"identifier": "SFO-01", "location": "San Francisco, CA"}, headers=clerk
    )
    assert forbidden.status_code == 403
    assert set(forbidden.json()) == {"detail"}


@pytest.mark.asyncio
async def test_document_upload_respects_cap(client, storage):
    owner = bearer(await sign_up(client))
    vendor = await client.post(
        "/vendors", json={"name": "Global Audit LLP", "tin": "98-7654321"}, headers=owner
    )
    vendor_id = vendor.json()["id"]

    files = [("files", (f"doc{i}.pdf", b"%PDF-1.7", "application/pdf")) for i in range(4)]
    rejected = await client.post(f"/vendors/{vendor_id}/documents", files=files, headers=owner)
    assert rejected.status_code == 400
    assert storage.objects == {}

    accepted = await client.post(f"/vendors/{vendor_id}/documents", files=files[:3], headers=owner)
    assert accepted.status_code == 201, accepted.text
    assert [d["name"] for d in accepted.json()["documents"]] == ["doc0.pdf", "doc1.pdf", "doc2.pdf"]


@pytest.mark.asyncio
async def test_null_for_required_vendor_field_is_a_validation_error(client):
    owner = bearer(await sign_up(client))
    vendor = await client.post(
        "/vendors", json={"name": "Global Audit LLP", "tin": "98-7654321"}, headers=owner
    )
    vendor_id = vendor.json()["id"]

    resp = await client.patch(f"/vendors/{vendor_id}", json={"name": None}, headers=owner)
    assert resp.status_code == 422

    unchanged = (await client.get("/vendors", headers=owner)).json()
    assert [v["name"] for v in unchanged] == ["Global Audit LLP"]


@pytest.mark.asyncio
async def test_branch_member_narrows_vendor_list_by_scope(client):
    owner = bearer(await sign_up(client))
    office = await client.post(
        "/branch-offices", json={"identifier": "NYC-01", "location": "New York, NY"}, headers=owner
    )
    invite = await client.post(
        f"/branch-offices/{office.json()['id']}/invites",
        json={"email": "branch.admin@acme-legal.com", "role": "branch_admin"},
        headers=owner,
    )
    token = invite.json()["invite_link"].rsplit("/", 1)[-1]
    accepted = await client.post(f"/invites/token/{token}/accept", json={"password": "branch-pass"})
    admin = bearer(accepted.json()["access_token"])

    await client.post("/vendors", json={"name": "HQ Supplies", "tin": "11-1111111"}, headers=owner)
    await client.post("/vendors", json={"name": "NYC Couriers", "tin": "22-2222222"}, headers=admin)

    async def names(scope=None):
        params = {"scope": scope} if scope else {}
        resp = await client.get("/vendors", params=params, headers=admin)
        assert resp.status_code == 200
        return {v["name"] for v in resp.json()}

    assert await names() == {"HQ Supplies", "NYC Couriers"}
    assert await names("all") == {"HQ Supplies", "NYC Couriers"}
    assert await names("organization") == {"HQ Supplies"}
    assert await names("branch") == {"NYC Couriers"}
