"""
Default admin dashboard sections and categories.
"""

from typing import Any

DEFAULT_SECTIONS: list[dict[str, Any]] = [
    {
        "title": "Blog",
        "description": "Manage blog posts with the new content schema",
        "icon": "FileText",
        "linkHref": "/admin/blogs",
        "linkText": "Manage Blog",
        "category": "content",
        "priority": 1,
    },
    {
        "title": "Profile",
        "description": "Update your personal information and contact details",
        "icon": "User",
        "linkHref": "/admin/profile",
        "linkText": "Edit Profile",
        "category": "frequent",
        "priority": 2,
    },
    {
        "title": "Settings",
        "description": "Manage your website settings",
        "icon": "Settings",
        "linkHref": "/admin/settings",
        "linkText": "Manage Settings",
        "category": "management",
        "priority": 3,
    },
    {
        "title": "Family",
        "description": "Manage family members and their access",
        "icon": "Users",
        "linkHref": "/admin/family",
        "linkText": "Manage Family",
        "category": "management",
        "priority": 4,
    },
    {
        "title": "Expertise",
        "description": "Manage your skills, certifications and professional competencies",
        "icon": "Star",
        "linkHref": "/admin/expertise",
        "linkText": "Manage Expertise",
        "category": "content",
        "priority": 5,
    },
    {
        "title": "My Works",
        "description": "Manage your research publications and legal case studies",
        "icon": "Award",
        "linkHref": "/admin/works",
        "linkText": "Manage Works",
        "category": "content",
        "priority": 6,
    },
    {
        "title": "Case Vault",
        "description": "Manage legal case studies and research",
        "icon": "Briefcase",
        "linkHref": "/admin/casevault",
        "linkText": "Manage Cases",
        "category": "content",
        "priority": 7,
    },
    {
        "title": "URL Shortener",
        "description": "Create and manage short URLs",
        "icon": "Link",
        "linkHref": "/admin/url-shortner",
        "linkText": "Manage URLs",
        "category": "tools",
        "priority": 8,
    },
    {
        "title": "Subscribers",
        "description": "View and manage newsletter subscribers",
        "icon": "Users",
        "linkHref": "/admin/subscribers",
        "linkText": "Manage Subscribers",
        "category": "management",
        "priority": 9,
    },
    {
        "title": "Footer",
        "description": "Customize footer content and settings",
        "icon": "FileText",
        "linkHref": "/admin/footer",
        "linkText": "Manage Footer",
        "category": "management",
        "priority": 10,
    },
]

DEFAULT_CATEGORIES: list[dict[str, Any]] = [
    {
        "name": "Content Management",
        "description": "Manage website content, blog posts, and media",
        "icon": "FileText",
        "order": 1,
    },
    {
        "name": "Profile & Experience",
        "description": "Manage your professional profile and experience",
        "icon": "User",
        "order": 2,
    },
    {
        "name": "Legal & Cases",
        "description": "Manage legal expertise and case vault",
        "icon": "Scale",
        "order": 3,
    },
    {
        "name": "Site Settings",
        "description": "Configure site settings and preferences",
        "icon": "Settings",
        "order": 4,
    },
    {
        "name": "Tools & Utilities",
        "description": "Access admin tools and utilities",
        "icon": "Wrench",
        "order": 5,
    },
]
