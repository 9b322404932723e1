"""GraphQL documents and search strings."""

from pr_monitor.core import Facet

PAGE_SIZE = 50

FACET_ALIASES = {
    Facet.AUTHORED: "authored",
    Facet.REVIEW_REQUESTED: "reviewRequested",
    Facet.ASSIGNED: "assigned",
    Facet.MENTIONED: "mentioned",
}

PULL_REQUEST_FIELDS = """
  id
  number
  title
  url
  state
  createdAt
  updatedAt
  isDraft
  author {
    login
  }
  repository {
    name
    owner {
      login
    }
  }
  reviewDecision
  commits {
    totalCount
  }
  comments {
    totalCount
  }
  reviews {
    totalCount
  }
  labels(first: 10) {
    nodes {
      name
      color
    }
  }
"""

GET_VIEWER = """
query GetViewer {
  viewer {
    login
  }
}
"""

GET_PULL_REQUEST = (
    """
query GetPullRequest($owner: String!, $repo: String!, $number: Int!) {
  repository(owner: $owner, name: $repo) {
    pullRequest(number: $number) {
"""
    + PULL_REQUEST_FIELDS
    + """
    }
  }
}
"""
)


def build_search_query(login: str, facet: Facet) -> str:
    """Build the search string for one facet of ``login``'s open pull requests."""
    if not login:
        raise ValueError("Login cannot be empty")
    return f"is:pr is:open {facet.qualifier}:{login} sort:updated-desc"


def build_facets_query(page_size: int = PAGE_SIZE) -> str:
    """Build one document fetching the rate limit and every facet search."""
    variables = ", ".join(f"${alias}Query: String!" for alias in FACET_ALIASES.values())
    searches = "".join(
        f"""
  {alias}: search(query: ${alias}Query, type: ISSUE, first: {page_size}) {{
    nodes {{
      ... on PullRequest {{{PULL_REQUEST_FIELDS}      }}
    }}
  }}"""
        for alias in FACET_ALIASES.values()
    )
    return f"""
query GetPullRequestFacets({variables}) {{
  rateLimit {{
    limit
    remaining
    used
    cost
    resetAt
  }}{searches}
}}
"""


def build_facet_variables(login: str) -> dict[str, str]:
    return {
        f"{alias}Query": build_search_query(login, facet)
        for facet, alias in FACET_ALIASES.items()
    }
