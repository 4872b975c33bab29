from pathlib import Path

from quire.content import FilePostLoader
from quire.extractors import FrontmatterExtractor
from quire.posts import PostRepository
from quire.protocols import ContentRenderer, MetadataExtractor, PostLoader, PostSource
from quire.renderers import MarkdownRenderer


def test_implementations_satisfy_protocols(tmp_path):
    assert isinstance(PostRepository(tmp_path), PostSource)
    assert isinstance(FilePostLoader(tmp_path), PostLoader)
    assert isinstance(FrontmatterExtractor(), MetadataExtractor)
    assert isinstance(MarkdownRenderer(), ContentRenderer)


def test_repository_uses_injected_collaborators(tmp_path):
    calls = []

    class StaticLoader:
        def iter_files(self):
            return [Path("a.md"), Path("b.md")]

        def resolve(self, identifier):
            calls.append(("resolve", identifier))
            return Path(f"{identifier}.md")

        @staticmethod
        def identifier_for(path):
            return path.stem

    class CannedExtractor:
        def extract(self, content, path):
            return {"date": {"a.md": "2020-01-01", "b.md": "2020-02-01"}[path.name]}, "body"

    class UpperRenderer:
        def render(self, content, path):
            return content.upper()

    class Repo(PostRepository):
        def _read(self, path):
            return self.metadata_extractor.extract("", path)

    repo = Repo(tmp_path, StaticLoader(), CannedExtractor(), UpperRenderer())
    assert [p.id for p in repo.list_post_summaries()] == ["b", "a"]
    post = repo.get_post("a")
    assert post.content_html == "BODY"
    assert calls == [("resolve", "a")]
