"""Integration tests for the build preparation phase."""

import json
from pathlib import Path

import pytest

from mdblog.build import prepare_build
from mdblog.channel import CHANNEL_FILE, restore_config
from mdblog.config import BlogConfig
from mdblog.errors import ShellError
from mdblog.generate import generate_static_site
from mdblog.shell import SHELL_SNAPSHOT


class TestPrepareBuild:
    """Tests for prepare_build."""

    def test_persists_config(self, blog_project: Path) -> None:
        """Test that the side-channel holds the build's config."""
        config = BlogConfig(out_dir="site")

        prepared = prepare_build(config)

        assert prepared.channel_file == Path(CHANNEL_FILE)
        assert restore_config() == config

    def test_stages_shell(self, blog_project: Path) -> None:
        """Test that the shell is copied into the output directory."""
        prepared = prepare_build(BlogConfig())

        assert prepared.shell_path == Path("dist/index.html")
        assert (blog_project / "dist" / "index.html").read_text() == (
            blog_project / "index.html"
        ).read_text()

    def test_copies_static_assets(self, blog_project: Path) -> None:
        """Test that static_dir is copied into the output directory."""
        prepared = prepare_build(BlogConfig())

        assert prepared.static_copied
        assert (blog_project / "dist" / "style.css").exists()

    def test_without_static_dir(self, blog_project: Path) -> None:
        """Test a project without static assets."""
        prepared = prepare_build(BlogConfig(static_dir="none"))

        assert not prepared.static_copied

    def test_clears_stale_snapshot(self, blog_project: Path) -> None:
        """Test that a new build replaces the shell snapshot."""
        (blog_project / SHELL_SNAPSHOT).write_text("old shell")

        prepare_build(BlogConfig())

        assert not (blog_project / SHELL_SNAPSHOT).exists()

    def test_empties_previous_output(self, blog_project: Path) -> None:
        """Test that files from an earlier build are removed."""
        (blog_project / "dist" / "post").mkdir(parents=True)
        (blog_project / "dist" / "post" / "old.html").write_text("<p>old</p>")

        prepare_build(BlogConfig())

        assert not (blog_project / "dist" / "post" / "old.html").exists()
        assert (blog_project / "dist" / "index.html").exists()

    def test_deleted_post_not_published(self, blog_project: Path) -> None:
        """Test that a rebuild after deleting a post drops its page."""
        prepare_build(BlogConfig())
        generate_static_site(BlogConfig())
        assert (blog_project / "dist" / "post" / "notes.html").exists()

        (blog_project / "src" / "content" / "notes.md").unlink()
        prepare_build(BlogConfig())
        generate_static_site(BlogConfig())

        assert not (blog_project / "dist" / "post" / "notes.html").exists()
        assert (blog_project / "dist" / "post" / "hello-world.html").exists()

    def test_output_outside_project_kept(self, blog_project: Path, tmp_path: Path) -> None:
        """Test that an output directory outside the project is not emptied."""
        outside = tmp_path / "elsewhere"
        outside.mkdir()
        (outside / "keep.txt").write_text("keep")

        prepare_build(BlogConfig(out_dir=str(outside)))

        assert (outside / "keep.txt").exists()
        assert (outside / "index.html").exists()

    def test_project_root_as_output_kept(self, blog_project: Path) -> None:
        """Test that the working directory itself is never emptied."""
        prepare_build(BlogConfig(out_dir="."))

        assert (blog_project / "src" / "content" / "hello-world.md").exists()

    def test_missing_shell_still_persists(self, blog_project: Path) -> None:
        """Test that the config is written even when staging fails."""
        (blog_project / "index.html").unlink()

        with pytest.raises(ShellError):
            prepare_build(BlogConfig(out_dir="site"))

        assert json.loads((blog_project / CHANNEL_FILE).read_text())["out_dir"] == "site"

    def test_missing_shell_keeps_previous_output(self, blog_project: Path) -> None:
        """Test that a failed preparation does not wipe the last build."""
        (blog_project / "dist").mkdir()
        (blog_project / "dist" / "index.html").write_text("<p>published</p>")
        (blog_project / "index.html").unlink()

        with pytest.raises(ShellError):
            prepare_build(BlogConfig())

        assert (blog_project / "dist" / "index.html").read_text() == "<p>published</p>"

    def test_explicit_channel_file(self, blog_project: Path, tmp_path: Path) -> None:
        """Test writing the side-channel to another location."""
        channel = tmp_path / "channel.json"

        prepared = prepare_build(BlogConfig(out_dir="site"), channel_file=channel)

        assert prepared.channel_file == channel
        assert restore_config(channel).out_dir == "site"
        assert not (blog_project / CHANNEL_FILE).exists()
