"""FastAPI router for the CompGen "Metasuche" endpoint.

The aggregator calls

    /MetaSearch?key=...&trees=a,b&lastname=...&placename=...&placeid=...&since=YYYY-MM-DD

and expects either the hits document or an error document.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from genealogy_metasearch.config import MetaSearchConfig
from genealogy_metasearch.core.errors import MetaSearchError
from genealogy_metasearch.search.federated import FederatedSearch
from genealogy_metasearch.settings.manager import SettingsManager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["MetaSearch"])


# Search service (singleton)
_search: FederatedSearch | None = None


def configure(search: FederatedSearch | None) -> None:
    """Install the search service used by the endpoint."""
    global _search
    _search = search


def get_search() -> FederatedSearch:
    """Get or create the search service from the environment."""
    global _search
    if _search is None:
        config = MetaSearchConfig.from_env()
        _search = FederatedSearch(
            config.record_store(),
            SettingsManager(config.preference_store()),
            config.search_config(),
        )
    return _search


@router.api_route("/MetaSearch", methods=["GET", "POST"])
async def metasearch(
    key: str | None = Query(None, description="Access key"),
    trees: str | None = Query(None, description="Comma-separated tree names"),
    tree: str | None = Query(None, description="Single tree name (older aggregators)"),
    lastname: str | None = Query(None, description="Surname"),
    placename: str | None = Query(None, description="Fragment of a place name"),
    placeid: str | None = Query(None, description="GOV identifier of a place"),
    since: str | None = Query(None, description="Changed after, YYYY-MM-DD"),
    search: FederatedSearch = Depends(get_search),
) -> JSONResponse:
    """Search the public trees for the aggregator."""
    params = {
        "key": key,
        "trees": trees,
        "tree": tree,
        "lastname": lastname,
        "placename": placename,
        "placeid": placeid,
        "since": since,
    }
    try:
        response = await search.search(params)
    except MetaSearchError as e:
        return JSONResponse(status_code=e.status_code, content=e.to_payload())

    return JSONResponse(content=response.to_dict())
