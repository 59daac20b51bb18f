"""Root test configuration: shared sample posts and an isolated working directory"""

import pytest


SAMPLE_POST = """\
---
title: "Common memory leaks in mobile apps"
date: 2023-05-01T10:00:00+08:00
author: Jane Doe
tags: ["mobile", "memory", "performance"]
draft: false
ShowToc: true
TocOpen: false
ShowReadingTime: true
ShowBreadCrumbs: true
weight: 10
cover:
  image: "images/leak.png"
  alt: "Heap graph"
  caption: "Retained objects after navigation"
  relative: false
  hidden: false
---

# Overview

Leaked **listeners** keep whole screens alive. See the [profiler docs](https://example.com/profiler).

## Static references

- Singletons holding a `Context`
- Handlers posting delayed messages

```kotlin
object Cache { var view: View? = null } // *not emphasis*
```

## Fixes

1. Unregister in `onDestroy`
2. Use weak references
"""

DRAFT_POST = """\
---
title: "Unfinished notes"
date: 2023-06-01
draft: true
---

Work in progress.
"""


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run every test from an empty directory with no MDSITE_* environment."""
    monkeypatch.chdir(tmp_path)
    for name in ("OUTPUT_DIR", "CONTENT_DIR", "PARSER_CONFIG", "TEMPLATE_DIR",
                 "INCLUDE_DRAFTS", "REQUIRED_KEYS", "LOG_LEVEL", "SITE_TITLE", "BASE_URL"):
        monkeypatch.delenv(f"MDSITE_{name}", raising=False)
    return tmp_path


@pytest.fixture(name="sample_post")
def sample_post_fixture():
    return SAMPLE_POST


@pytest.fixture(name="content_dir")
def content_dir_fixture(tmp_path):
    """A content tree with one published post, one draft, and one page bundle."""
    root = tmp_path / "content"
    posts = root / "posts"
    posts.mkdir(parents=True)
    (posts / "memory-leaks.md").write_text(SAMPLE_POST, encoding="utf-8")
    (posts / "notes.md").write_text(DRAFT_POST, encoding="utf-8")
    bundle = posts / "hello-world"
    bundle.mkdir()
    (bundle / "index.md").write_text(
        "---\ntitle: Hello World\ndate: 2024-01-02\ntags: intro\n---\n\nFirst post.\n",
        encoding="utf-8",
    )
    (posts / "_index.md").write_text("---\ntitle: Posts\n---\n", encoding="utf-8")
    return root
