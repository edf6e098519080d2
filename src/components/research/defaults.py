"""
Seed data for the research page.
"""

from typing import Any

DEFAULT_DOMAINS: list[str] = [
    "Law",
    "Constitutional Law",
    "Human Rights",
    "Politics",
    "Education Policy",
    "Governance",
    "Environmental Law",
    "Technology & Law",
    "Social Justice",
    "Other",
]

DEFAULT_STUDIES: list[dict[str, Any]] = [
    {
        "id": "1",
        "title": "The Impact of Constitutional Amendments on Fundamental Rights in India",
        "abstract": (
            "How successive amendments to the Indian Constitution have shaped the "
            "interpretation and application of fundamental rights."
        ),
        "year": 2023,
        "domain": "Constitutional Law",
        "tags": ["Constitution", "Fundamental Rights", "Amendments", "Supreme Court"],
        "fileUrl": "/placeholder-pdf.pdf",
        "publishedIn": "Indian Constitutional Law Review",
        "author": "",
        "publishedAt": "2023-05-15",
        "featured": True,
        "views": 320,
    },
    {
        "id": "2",
        "title": "Judicial Activism and Environmental Protection",
        "abstract": (
            "Landmark judgments of the National Green Tribunal and their effect on "
            "environmental policy."
        ),
        "year": 2022,
        "domain": "Environmental Law",
        "tags": ["Environment", "Judicial Activism", "National Green Tribunal", "Case Study"],
        "externalUrl": "https://example.com/research/environmental-justice",
        "publishedIn": "Environmental Law Journal",
        "author": "",
        "publishedAt": "2022-11-10",
        "featured": True,
        "views": 275,
    },
    {
        "id": "3",
        "title": "Digital Privacy and State Surveillance",
        "abstract": (
            "The legal framework for state digital surveillance and reforms that "
            "protect privacy while keeping national security intact."
        ),
        "year": 2023,
        "domain": "Technology & Law",
        "tags": ["Digital Privacy", "Surveillance", "Technology Law", "Civil Liberties"],
        "externalUrl": "https://example.com/research/digital-privacy",
        "publishedIn": "Tech Law Forum",
        "author": "",
        "publishedAt": "2023-08-22",
        "featured": False,
        "views": 189,
    },
    {
        "id": "4",
        "title": "Access to Justice: Legal Aid Programs in Rural India",
        "abstract": (
            "An empirical study of the reach and effectiveness of legal aid programs "
            "in rural areas."
        ),
        "year": 2022,
        "domain": "Social Justice",
        "tags": ["Legal Aid", "Access to Justice", "Rural Communities", "Empirical Study"],
        "fileUrl": "/placeholder-pdf.pdf",
        "publishedIn": "Social Justice Review",
        "author": "",
        "publishedAt": "2022-04-30",
        "featured": False,
        "views": 210,
    },
]
