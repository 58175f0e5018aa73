"""
Configuration validation, asset naming, digest tool and logging
"""

import logging
from dataclasses import replace

import pytest

from answer_system import digest_tool, hash_answer, is_valid_digest
from display_system import AssetResolver, STEP_BACKGROUNDS
from story_system import CardDefinition, Step, TimingConfig
from spellcards import build_parser, create_story_config
from utils import HybridLogger

from conftest import make_config


def test_default_story_validates():
    config = create_story_config(test_mode=True)
    config.validate()
    assert config.card_count == 9
    assert config.target_fps == 50.0


def test_default_story_digests_are_well_formed():
    config = create_story_config()
    digests = [card.answer_digest for card in config.cards] + [config.final_answer_digest]
    assert all(is_valid_digest(digest) for digest in digests)
    assert len(set(digests)) == len(digests)
    assert config.card_ids == list(range(1, 10))


def test_duplicate_card_ids_rejected():
    config = make_config()
    config.cards.append(CardDefinition(1, hash_answer("again")))
    with pytest.raises(ValueError, match="Duplicate"):
        config.validate()


def test_empty_deck_rejected():
    config = make_config()
    config.cards = []
    with pytest.raises(ValueError):
        config.validate()


@pytest.mark.parametrize("digest", ["", "abc", "A" * 64, "g" * 64])
def test_malformed_final_digest_rejected(digest):
    config = make_config()
    config.final_answer_digest = digest
    with pytest.raises(ValueError):
        config.validate()


def test_non_positive_timing_rejected():
    config = make_config()
    config.timing = replace(TimingConfig(), light_1_ms=0)
    with pytest.raises(ValueError):
        config.validate()


def test_cli_parses_target():
    args = build_parser().parse_args(["--test-mode", "--mock-audio", "--target", "2026-12-24T20:00"])
    assert args.test_mode and args.mock_audio
    assert args.target.hour == 20
    assert args.assets == "assets"


def test_every_step_has_a_background():
    assert set(STEP_BACKGROUNDS) == set(Step)


def test_preload_names_cover_cards(tmp_path):
    resolver = AssetResolver(str(tmp_path))
    names = resolver.preload_names([1, 2])
    assert names[0] == "home.png"
    assert "card_2_front.png" in names and "card_2_back.png" in names
    assert names[-1] == "end.png"

    (tmp_path / "home.png").write_bytes(b"")
    assert resolver.exists("home.png")
    assert "home.png" not in resolver.missing(names)
    assert "end.png" in resolver.missing(names)


def test_digest_tool_prints_digest(capsys):
    assert digest_tool.main(["  Lantern "]) == 0
    out = capsys.readouterr().out
    assert hash_answer("lantern") in out
    assert "'lantern'" in out


def test_digest_tool_check():
    digest = hash_answer("quill")
    assert digest_tool.main(["--check", "QUILL", digest]) == 0
    assert digest_tool.main(["--check", "dusk", digest]) == 1
    assert digest_tool.main(["--check", "quill", "nope"]) == 2
    assert digest_tool.main([]) == 2


def test_hybrid_logger_writes_file(tmp_path):
    main_logger = HybridLogger("spellcards-file", log_dir=str(tmp_path), console=False)
    story_logger = main_logger.get_class_logger("Story")
    assert main_logger.get_class_logger("Story") is story_logger

    child = story_logger.create_class_logger("Child", logging.DEBUG)
    story_logger.info("Step transition: HOME → START")
    story_logger.debug("hidden at INFO")
    child.debug("shown at DEBUG")
    main_logger.cleanup()

    text = main_logger.log_file.read_text(encoding="utf-8")
    assert "[Story]" in text
    assert "HOME → START" in text
    assert "hidden at INFO" not in text
    assert "shown at DEBUG" in text
