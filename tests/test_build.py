from pathlib import Path

import pytest

from quire.build import DEFAULT_CONFIG, BuildError, build_site, load_config
from quire.errors import QuireError


def create_project(tmp_path: Path) -> Path:
    root = tmp_path / "blog"
    posts = root / "posts"
    posts.mkdir(parents=True)
    (root / "quire.yaml").write_text("title: Build Test\nintro: Welcome\n", encoding="utf-8")
    (posts / "ssg-ssr.md").write_text(
        '---\ntitle: "When to Use SSG"\ndate: "2020-01-02"\n---\nUse *static* pages.\n',
        encoding="utf-8",
    )
    (posts / "pre-rendering.md").write_text(
        '---\ntitle: "Two Forms"\ndate: "2020-01-01"\n---\n# Forms\n',
        encoding="utf-8",
    )
    return root


def test_load_config_defaults_and_overrides(tmp_path):
    assert load_config(tmp_path) == DEFAULT_CONFIG
    (tmp_path / "quire.yaml").write_text("title: Mine\nport: 8080\n", encoding="utf-8")
    config = load_config(tmp_path)
    assert config["title"] == "Mine"
    assert config["port"] == 8080
    assert config["posts_dir"] == "posts"


def test_load_config_ignores_non_mapping(tmp_path):
    (tmp_path / "quire.yaml").write_text("- a\n- b\n", encoding="utf-8")
    assert load_config(tmp_path) == DEFAULT_CONFIG


def test_load_config_invalid_yaml(tmp_path):
    (tmp_path / "quire.yaml").write_text("title: [broken\n", encoding="utf-8")
    with pytest.raises(QuireError):
        load_config(tmp_path)


def test_build_site_writes_pages(tmp_path):
    root = create_project(tmp_path)
    result = build_site(root)
    out = root / "output"
    assert result.output_dir == out
    assert [p.id for p in result.posts] == ["ssg-ssr", "pre-rendering"]
    assert set(result.written) == {
        Path("index.html"),
        Path("posts/ssg-ssr/index.html"),
        Path("posts/pre-rendering/index.html"),
        Path("404.html"),
    }
    home = (out / "index.html").read_text(encoding="utf-8")
    assert "Build Test" in home and "Welcome" in home
    assert home.index("When to Use SSG") < home.index("Two Forms")
    post = (out / "posts" / "ssg-ssr" / "index.html").read_text(encoding="utf-8")
    assert "<em>static</em>" in post
    assert (out / "404.html").exists()
    assert not (out / "api").exists()


def test_build_cleans_output_unless_asked(tmp_path):
    root = create_project(tmp_path)
    stale = root / "output" / "stale.html"
    stale.parent.mkdir(parents=True)
    stale.write_text("old", encoding="utf-8")
    build_site(root, clean_output=False)
    assert stale.exists()
    build_site(root)
    assert not stale.exists()


def test_build_output_override(tmp_path):
    root = create_project(tmp_path)
    target = tmp_path / "elsewhere"
    result = build_site(root, output_dir_override=target)
    assert result.output_dir == target
    assert (target / "index.html").exists()
    assert not (root / "output").exists()


def test_build_malformed_post_fails_with_context(tmp_path):
    root = create_project(tmp_path)
    bad = root / "posts" / "broken.md"
    bad.write_text("---\ntitle: [oops\n---\n", encoding="utf-8")
    (root / "output").mkdir()
    (root / "output" / "keep.html").write_text("previous build", encoding="utf-8")
    with pytest.raises(BuildError) as excinfo:
        build_site(root)
    assert excinfo.value.source_path == bad
    assert "YAML" in excinfo.value.message
    # A failed build leaves the previous output alone
    assert (root / "output" / "keep.html").exists()


def test_build_missing_posts_dir(tmp_path):
    root = tmp_path / "empty"
    root.mkdir()
    with pytest.raises(BuildError) as excinfo:
        build_site(root)
    assert excinfo.value.source_path == root / "posts"


def test_build_reports_layout_errors(tmp_path):
    root = create_project(tmp_path)
    layouts = root / "layouts"
    layouts.mkdir()
    (layouts / "home.html.jinja").write_text("{% if %}", encoding="utf-8")
    with pytest.raises(BuildError) as excinfo:
        build_site(root)
    assert "Template syntax error" in excinfo.value.message


def test_build_writes_posts_with_unusual_filenames(tmp_path):
    root = create_project(tmp_path)
    (root / "posts" / "my post.md").write_text(
        '---\ntitle: "Spaced Out"\ndate: "2020-01-03"\n---\nHello.\n',
        encoding="utf-8",
    )
    result = build_site(root)
    assert Path("posts/my post/index.html") in result.written
    page = (root / "output" / "posts" / "my post" / "index.html").read_text(encoding="utf-8")
    assert "Spaced Out" in page
    home = (root / "output" / "index.html").read_text(encoding="utf-8")
    assert "/posts/my%20post/" in home
