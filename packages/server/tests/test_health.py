"""
Health check endpoint tests.
"""

from httpx import AsyncClient


async def test_health_check(client: AsyncClient):
    """Health endpoint should return status ok."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_api_root(client: AsyncClient):
    """API v1 root should return version and endpoint list."""
    response = await client.get("/api/v1/")
    assert response.status_code == 200
    data = response.json()
    assert data["api"] == "v1"
    assert "/orgs/{org_id}/projects" in data["endpoints"]


async def test_unknown_route_is_problem_json(client: AsyncClient):
    response = await client.get("/api/v1/nowhere")
    assert response.status_code == 404
    assert response.headers["content-type"].startswith("application/problem+json")


async def test_openapi_documents_problem_details(client: AsyncClient):
    response = await client.get("/openapi.json")
    assert response.status_code == 200
    spec = response.json()
    assert set(spec["components"]["schemas"]["ProblemDetail"]["required"]) == {"title", "status"}

    listing = spec["paths"]["/api/v1/orgs/{org_id}/projects"]["get"]["responses"]
    for status in ("401", "403", "404"):
        assert listing[status]["content"]["application/problem+json"] == {}
        assert listing[status]["content"]["application/json"]["schema"] == {
            "$ref": "#/components/schemas/ProblemDetail"
        }
