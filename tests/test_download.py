"""Tests for download.py — on-disk layout, depth limit, best-effort failures."""

import json
import os
import re
from unittest.mock import patch

import pytest

from kaiten_cli.download import (
    download_attachments,
    download_card_tree,
    save_card_bundle,
)
from kaiten_cli.exceptions import CliError


def _tree_fetcher(tree):
    """Fake fetch_card_bundle over {card_id: [child ids]}."""

    def fetch(card_id, **kwargs):
        card_id = int(card_id)
        if card_id not in tree:
            raise CliError(f"[ERROR] HTTP 404: Not Found (GET /cards/{card_id})")
        child_ids = tree[card_id]
        card = {"id": card_id, "title": f"Card {card_id}", "children_count": len(child_ids)}
        children = [{"id": c, "title": f"Card {c}"} for c in child_ids]
        return {"card": card, "comments": [], "children": children}

    return fetch


def _card_dirs(root):
    found = set()
    for dirpath, _dirs, files in os.walk(root):
        if "card.md" in files:
            found.add(int(os.path.basename(dirpath)))
    return found


class TestSaveCardBundle:
    @patch("kaiten_cli.download.download_file")
    def test_layout(self, mock_download, tmp_path):
        card = {
            "id": 5,
            "title": "Bundle",
            "files": [{"id": 1, "name": "a.png", "url": "https://example.kaiten.ru/a.png"}],
        }
        comments = [{"id": 100, "text": "first"}, {"id": 200, "text": "second"}]
        steps = save_card_bundle(
            {"card": card, "comments": comments, "children": []}, str(tmp_path)
        )
        assert (tmp_path / "card.md").read_text(encoding="utf-8").startswith("# Bundle\n")
        assert json.loads((tmp_path / "card.json").read_text(encoding="utf-8")) == card
        assert sorted(os.listdir(tmp_path / "comments")) == ["1_100.json", "2_200.json"]
        assert json.loads((tmp_path / "comments" / "2_200.json").read_text()) == comments[1]
        assert [s.ok for s in steps] == [True]
        mock_download.assert_called_once()
        assert mock_download.call_args.args[1] == os.path.join(str(tmp_path), "files", "a.png")

    @patch("kaiten_cli.download.download_file")
    def test_no_comments_no_files_dirs(self, mock_download, tmp_path):
        save_card_bundle({"card": {"id": 1, "title": "T"}, "comments": [], "children": []}, str(tmp_path))
        assert sorted(os.listdir(tmp_path)) == ["card.json", "card.md"]
        mock_download.assert_not_called()

    @patch("kaiten_cli.download.download_file")
    def test_skip_files(self, mock_download, tmp_path):
        card = {"id": 1, "title": "T", "files": [{"name": "a.txt", "url": "u"}]}
        steps = save_card_bundle({"card": card, "comments": []}, str(tmp_path), skip_files=True)
        assert steps == []
        mock_download.assert_not_called()

    def test_card_json_round_trip(self, tmp_path):
        card = {
            "id": 9,
            "title": "Ünïcode",
            "description": "<p>x</p>",
            "members": [{"username": "a", "type": 2}],
            "estimate": 1.5,
            "status": None,
        }
        save_card_bundle({"card": card, "comments": []}, str(tmp_path))
        assert json.loads((tmp_path / "card.json").read_text(encoding="utf-8")) == card


class TestDownloadAttachments:
    @patch("kaiten_cli.download.download_file")
    def test_failure_does_not_abort(self, mock_download, tmp_path, capsys):
        mock_download.side_effect = [CliError("[ERROR] Download failed: nope"), 3]
        card = {
            "id": 1,
            "files": [{"name": "bad.bin", "url": "u1"}, {"name": "good.bin", "url": "u2"}],
        }
        steps = download_attachments(card, str(tmp_path))
        assert [(s.target, s.ok) for s in steps] == [("bad.bin", False), ("good.bin", True)]
        assert "nope" in steps[0].error
        assert "[WARN] Failed to download file 'bad.bin'" in capsys.readouterr().err


class TestDownloadCardTree:
    @patch("kaiten_cli.download.fetch_card_bundle")
    def test_single_card(self, mock_fetch, tmp_path):
        mock_fetch.side_effect = _tree_fetcher({1: []})
        node = download_card_tree(1, str(tmp_path))
        assert node.directory == os.path.join(str(tmp_path), "1")
        assert node.children == []
        assert not (tmp_path / "1" / "children").exists()

    @patch("kaiten_cli.download.fetch_card_bundle")
    def test_nested_layout(self, mock_fetch, tmp_path):
        mock_fetch.side_effect = _tree_fetcher({1: [2, 3], 2: [4], 3: [], 4: []})
        node = download_card_tree(1, str(tmp_path))
        assert (tmp_path / "1" / "children" / "2" / "children" / "4" / "card.md").exists()
        assert (tmp_path / "1" / "children" / "3" / "card.md").exists()
        assert [c.card["id"] for c in node.children] == [2, 3]
        assert node.children[0].children[0].card["id"] == 4

    @pytest.mark.parametrize("max_depth", [0, 1, 2, 3, 5])
    @patch("kaiten_cli.download.fetch_card_bundle")
    def test_depth_bound(self, mock_fetch, max_depth, tmp_path):
        # chain 1 -> 2 -> 3 -> 4 -> 5 (depths 0..4)
        mock_fetch.side_effect = _tree_fetcher({1: [2], 2: [3], 3: [4], 4: [5], 5: []})
        download_card_tree(1, str(tmp_path), max_depth=max_depth)
        expected = set(range(1, min(4, max_depth) + 2))
        assert _card_dirs(tmp_path) == expected

    @patch("kaiten_cli.download.fetch_card_bundle")
    def test_depth_limit_marks_skipped(self, mock_fetch, tmp_path, capsys):
        mock_fetch.side_effect = _tree_fetcher({1: [2], 2: []})
        node = download_card_tree(1, str(tmp_path), max_depth=0)
        assert node.children_skipped is True
        assert node.children == []
        assert "Max depth 0 reached at card 1" in capsys.readouterr().err
        assert mock_fetch.call_count == 1

    @patch("kaiten_cli.download.fetch_card_bundle")
    def test_child_failure_isolated(self, mock_fetch, tmp_path, capsys):
        mock_fetch.side_effect = _tree_fetcher({1: [2, 3, 4], 2: [], 4: []})
        node = download_card_tree(1, str(tmp_path))
        assert [c.card["id"] for c in node.children] == [2, 4]
        assert [(f.kind, f.target) for f in node.failures] == [("child", "3")]
        assert "Failed to download child card 3" in capsys.readouterr().err

    @patch("kaiten_cli.download.fetch_card_bundle")
    def test_root_failure_propagates(self, mock_fetch, tmp_path):
        mock_fetch.side_effect = _tree_fetcher({})
        with pytest.raises(CliError):
            download_card_tree(1, str(tmp_path))

    @patch("kaiten_cli.download.download_file")
    @patch("kaiten_cli.download.fetch_card_bundle")
    def test_skip_files_propagates_to_children(self, mock_fetch, mock_download, tmp_path):
        def fetch(card_id, **kwargs):
            card_id = int(card_id)
            card = {
                "id": card_id,
                "title": "T",
                "children_count": 1 if card_id == 1 else 0,
                "files": [{"name": "a.txt", "url": "u"}],
            }
            children = [{"id": 2, "title": "C"}] if card_id == 1 else []
            return {"card": card, "comments": [], "children": children}

        mock_fetch.side_effect = fetch
        download_card_tree(1, str(tmp_path), skip_files=True)
        mock_download.assert_not_called()

    @patch("kaiten_cli.download.fetch_card_bundle")
    def test_markdown_links_match_layout(self, mock_fetch, tmp_path):
        mock_fetch.side_effect = _tree_fetcher({1: [2], 2: []})
        node = download_card_tree(1, str(tmp_path))
        assert "(./children/2/card.md)" in node.markdown
        assert (tmp_path / "1" / "children" / "2" / "card.md").exists()


class TestAttachmentErrors:
    def test_bad_url_is_recorded_not_raised(self, tmp_path, capsys):
        card = {
            "id": 1,
            "files": [
                {"name": "bad.bin", "url": "not-a-url"},
                {"name": "worse.bin", "url": "also bad"},
            ],
        }
        steps = download_attachments(card, str(tmp_path))
        assert [s.ok for s in steps] == [False, False]
        assert os.listdir(tmp_path / "files") == []
        assert capsys.readouterr().err.count("[WARN]") == 2

    @patch("kaiten_cli.download.fetch_card_bundle")
    def test_bad_child_attachment_keeps_siblings(self, mock_fetch, tmp_path):
        def fetch(card_id, **kwargs):
            card_id = int(card_id)
            children = [{"id": 2, "title": "B"}, {"id": 3, "title": "C"}] if card_id == 1 else []
            files = [{"name": "x.bin", "url": "not-a-url"}] if card_id == 2 else []
            card = {"id": card_id, "title": "T", "children_count": len(children), "files": files}
            return {"card": card, "comments": [], "children": children}

        mock_fetch.side_effect = fetch
        node = download_card_tree(1, str(tmp_path))
        assert [c.card["id"] for c in node.children] == [2, 3]
        assert [(f.kind, f.target) for f in node.children[0].failures] == [("file", "x.bin")]
        assert (tmp_path / "1" / "children" / "3" / "card.md").exists()


class TestAttachmentNames:
    @patch("kaiten_cli.download.download_file")
    def test_links_point_at_saved_files(self, mock_download, tmp_path):
        def fake_download(url, dest, **kwargs):
            with open(dest, "wb") as f:
                f.write(url.encode())
            return len(url)

        mock_download.side_effect = fake_download
        card = {
            "id": 1,
            "title": "T",
            "files": [
                {"id": 7, "name": "docs/spec.pdf", "url": "u1"},
                {"id": 8, "name": "spec.pdf", "url": "u2"},
                {"id": 9, "name": "shot.png", "url": "u3"},
            ],
        }
        save_card_bundle({"card": card, "comments": []}, str(tmp_path))
        markdown = (tmp_path / "card.md").read_text(encoding="utf-8")
        targets = re.findall(r"\]\(\./files/([^)]+)\)", markdown)
        assert targets == ["spec.pdf", "8_spec.pdf", "shot.png"]
        for target in targets:
            assert (tmp_path / "files" / target).exists()
        assert (tmp_path / "files" / "spec.pdf").read_bytes() == b"u1"
        assert (tmp_path / "files" / "8_spec.pdf").read_bytes() == b"u2"
