"""HTML landing page generation."""

from datetime import datetime
from html import escape
from typing import Optional

from .models import ClusterEntry, GroupEntry, RouteEntry, Snapshot


def generate_landing_html(snapshot: Snapshot, published_at: Optional[datetime] = None) -> str:
    """Render the landing page for a snapshot."""
    cluster_count = sum(len(group.clusters) for group in snapshot)
    route_count = sum(len(cluster.routes) for group in snapshot for cluster in group.clusters)
    updated = published_at.strftime("%Y-%m-%d %H:%M:%S UTC") if published_at else "never"

    if snapshot:
        body = "".join(generate_group_section(group) for group in snapshot)
    else:
        body = '<div class="empty">No clusters configured.</div>'

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Landing Page</title>
    <style>
        * {{
            margin: 0;
            padding: 0;
            box-sizing: border-box;
        }}

        body {{
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            background: #f4f5f7;
            color: #222;
            padding: 20px;
        }}

        .container {{
            max-width: 1200px;
            margin: 0 auto;
        }}

        .header {{
            margin-bottom: 20px;
        }}

        .header h1 {{
            font-size: 2rem;
            margin-bottom: 6px;
        }}

        .meta {{
            color: #666;
            font-size: 0.9rem;
        }}

        #search {{
            width: 100%;
            padding: 10px 14px;
            margin: 16px 0 24px;
            border: 1px solid #ccc;
            border-radius: 6px;
            font-size: 1rem;
        }}

        .group {{
            margin-bottom: 28px;
        }}

        .group h2 {{
            font-size: 1.4rem;
            border-bottom: 2px solid #ddd;
            padding-bottom: 4px;
            margin-bottom: 12px;
        }}

        .cluster h3 {{
            font-size: 1.1rem;
            margin: 12px 0 8px;
        }}

        .cluster-description {{
            color: #666;
            font-weight: normal;
            font-size: 0.9rem;
            margin-left: 6px;
        }}

        .routes {{
            display: grid;
            grid-template-columns: repeat(auto-fill, minmax(260px, 1fr));
            gap: 12px;
        }}

        .route-card {{
            background: white;
            border-radius: 8px;
            padding: 14px;
            box-shadow: 0 1px 3px rgba(0,0,0,0.1);
        }}

        .route-card a {{
            color: #1a5fb4;
            font-weight: 600;
            text-decoration: none;
        }}

        .route-description, .route-url {{
            color: #555;
            font-size: 0.85rem;
            margin-top: 4px;
            word-break: break-all;
        }}

        .empty {{
            color: #888;
            font-style: italic;
        }}

        .hidden {{
            display: none;
        }}
    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1>Landing Page</h1>
            <div class="meta">{len(snapshot)} groups &middot; {cluster_count} clusters &middot; {route_count} routes &middot; updated {updated}</div>
        </div>
        <input type="text" id="search" placeholder="Search routes..." oninput="filterRoutes(this.value)">
        {body}
    </div>
    <script>
        function filterRoutes(query) {{
            const needle = query.toLowerCase();
            document.querySelectorAll('.route-card').forEach(card => {{
                const match = card.textContent.toLowerCase().includes(needle);
                card.classList.toggle('hidden', !match);
            }});
            document.querySelectorAll('.cluster').forEach(cluster => {{
                const visible = cluster.querySelectorAll('.route-card:not(.hidden)').length;
                cluster.classList.toggle('hidden', needle !== '' && visible === 0);
            }});
        }}
    </script>
</body>
</html>
"""


def generate_group_section(group: GroupEntry) -> str:
    if group.clusters:
        clusters = "".join(generate_cluster_section(cluster) for cluster in group.clusters)
    else:
        clusters = '<div class="empty">No clusters available.</div>'
    return f"""
        <div class="group" data-group="{escape(group.name)}">
            <h2>{escape(group.name)}</h2>
            {clusters}
        </div>
    """


def generate_cluster_section(cluster: ClusterEntry) -> str:
    description = ""
    if cluster.description:
        description = f'<span class="cluster-description">{escape(cluster.description)}</span>'
    if cluster.routes:
        routes = f'<div class="routes">{"".join(generate_route_card(route) for route in cluster.routes)}</div>'
    else:
        routes = '<div class="empty">No routes found.</div>'
    return f"""
            <div class="cluster">
                <h3>{escape(cluster.name)}{description}</h3>
                {routes}
            </div>
    """


def generate_route_card(route: RouteEntry) -> str:
    description = ""
    if route.description:
        description = f'<div class="route-description">{escape(route.description)}</div>'
    return f"""
                <div class="route-card">
                    <a href="{escape(route.url)}" target="_blank" rel="noopener">{escape(route.name)}</a>
                    {description}
                    <div class="route-url">{escape(route.url)}</div>
                </div>
    """
