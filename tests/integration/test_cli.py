"""End-to-end tests for the command-line entry point with the OpenAI client mocked."""
import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import yaml

from json_translator import cli
from json_translator.exceptions import TranslationCallFailure


def _stub_translation_client(side_effect):
    translation_client = MagicMock()
    translation_client.translate = AsyncMock(side_effect=side_effect)
    return translation_client


def _shout(texts, target_language, system_instructions, model):
    return [f"[{target_language}] {text}" for text in texts]


@pytest.fixture
def mocked_openai():
    """Patch client creation so no network access or API key is needed."""
    openai_client = MagicMock()
    openai_client.close = AsyncMock()
    translation_client = _stub_translation_client(_shout)
    with patch('json_translator.cli.create_openai_client', return_value=openai_client) as mock_create, \
         patch('json_translator.cli.OpenAITranslationClient', return_value=translation_client) as mock_wrapper:
        yield {
            "create": mock_create,
            "wrapper": mock_wrapper,
            "openai_client": openai_client,
            "translation_client": translation_client,
        }


def _read_json(path):
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def test_translates_and_writes_next_to_input(locale_dir, mocked_openai, capsys):
    exit_code = cli.main(['-i', str(locale_dir / 'en.json'), '-l', 'de', '-b', '2'])

    assert exit_code == 0
    output_path = locale_dir / 'de.json'
    output = _read_json(output_path)
    assert list(output) == ["app.title", "nav.home", "welcome.html", "footer.note", "spacer"]
    assert output["app.title"] == "[German] My App"
    assert output["footer.note"] == "[German] First line\nSecond line"
    assert output["spacer"] == "   "
    assert f"Translation complete. Output saved to {output_path}" in capsys.readouterr().out

    translate_call = mocked_openai["translation_client"].translate.await_args_list[0]
    assert translate_call.args[1] == "German"
    assert translate_call.args[3] == "gpt-4o-mini"
    mocked_openai["openai_client"].close.assert_awaited_once()


def test_output_directory_filename_and_model_flags(locale_dir, tmp_path, mocked_openai):
    out_dir = tmp_path / 'dist' / 'i18n'
    exit_code = cli.main([
        '--input', str(locale_dir / 'en.json'),
        '--language', 'zh-TW',
        '--output', str(out_dir),
        '--filename', 'traditional',
        '--model', 'gpt-4o',
    ])

    assert exit_code == 0
    assert (out_dir / 'traditional.json').exists()
    translate_call = mocked_openai["translation_client"].translate.await_args_list[0]
    assert translate_call.args[1] == "Traditional Chinese"
    assert translate_call.args[3] == "gpt-4o"


def test_config_file_supplies_defaults(locale_dir, tmp_path, mocked_openai):
    config_path = tmp_path / 'translator.yaml'
    with open(config_path, 'w', encoding='utf-8') as f:
        yaml.dump({
            "model_name": "gpt-4.1-mini",
            "batch_size": 1,
            "custom_prompt": "Use the informal 'du'.",
            "temperature": 0.1,
            "supported_locales": [{"code": "de", "name": "Swiss German"}],
            "logging": {"log_file_path": "", "log_to_console": False},
        }, f)

    exit_code = cli.main(['-c', str(config_path), '-i', str(locale_dir / 'en.json'), '-l', 'de'])

    assert exit_code == 0
    calls = mocked_openai["translation_client"].translate.await_args_list
    # Four non-blank values, one per batch; the blank batch makes no call.
    assert len(calls) == 4
    assert all(call.args[1] == "Swiss German" for call in calls)
    assert all(call.args[2].endswith(" Use the informal 'du'.") for call in calls)
    assert all(call.args[3] == "gpt-4.1-mini" for call in calls)
    mocked_openai["wrapper"].assert_called_once_with(mocked_openai["openai_client"], temperature=0.1)


def test_translation_failure_exits_non_zero_without_output(locale_dir, mocked_openai):
    mocked_openai["translation_client"].translate = AsyncMock(side_effect=TranslationCallFailure("401 Unauthorized"))

    exit_code = cli.main(['-i', str(locale_dir / 'en.json'), '-l', 'fr'])

    assert exit_code == 1
    assert not (locale_dir / 'fr.json').exists()
    mocked_openai["openai_client"].close.assert_awaited_once()


def test_mismatch_exits_non_zero_without_output(locale_dir, mocked_openai):
    mocked_openai["translation_client"].translate = AsyncMock(side_effect=lambda texts, *args: ["one line"])

    exit_code = cli.main(['-i', str(locale_dir / 'en.json'), '-l', 'fr', '-b', '3'])

    assert exit_code == 1
    assert not (locale_dir / 'fr.json').exists()


def test_missing_api_key_exits_non_zero(locale_dir):
    exit_code = cli.main(['-i', str(locale_dir / 'en.json'), '-l', 'fr'])
    assert exit_code == 1
    assert not (locale_dir / 'fr.json').exists()


def test_missing_input_exits_non_zero(tmp_path, mocked_openai):
    exit_code = cli.main(['-i', str(tmp_path / 'missing' / 'en.json'), '-l', 'fr'])
    assert exit_code == 1
    mocked_openai["translation_client"].translate.assert_not_awaited()


def test_dry_run_reports_without_client(locale_dir, mocked_openai, capsys):
    exit_code = cli.main(['-i', str(locale_dir / 'en.json'), '-l', 'es', '--dry-run'])

    assert exit_code == 0
    assert not (locale_dir / 'es.json').exists()
    mocked_openai["create"].assert_not_called()
    assert "5 key(s) would be translated" in capsys.readouterr().out


def test_invalid_batch_size_exits_non_zero(locale_dir, mocked_openai):
    exit_code = cli.main(['-i', str(locale_dir / 'en.json'), '-l', 'de', '-b', '0'])
    assert exit_code == 1
    mocked_openai["create"].assert_not_called()


def test_invalid_config_file_exits_non_zero(locale_dir, tmp_path, capsys):
    config_path = tmp_path / 'broken.yaml'
    config_path.write_text("batch_size: [1\n", encoding='utf-8')

    exit_code = cli.main(['-c', str(config_path), '-i', str(locale_dir / 'en.json'), '-l', 'de'])

    assert exit_code == 1
    assert "Invalid YAML" in capsys.readouterr().err


def test_explicit_missing_env_file_exits_non_zero(locale_dir, tmp_path, mocked_openai, capsys):
    exit_code = cli.main(['-e', str(tmp_path / 'missing.env'), '-i', str(locale_dir / 'en.json'), '-l', 'de'])

    assert exit_code == 1
    assert "Environment file" in capsys.readouterr().err
    mocked_openai["create"].assert_not_called()
    assert not (locale_dir / 'de.json').exists()


def test_default_run_writes_no_log_file(locale_dir, tmp_path, mocked_openai):
    exit_code = cli.main(['-i', str(locale_dir / 'en.json'), '-l', 'de'])

    assert exit_code == 0
    assert not (tmp_path / 'logs').exists()


def test_unwritable_log_file_exits_non_zero(locale_dir, tmp_path, mocked_openai, capsys):
    blocker = tmp_path / 'not_a_directory'
    blocker.write_text("", encoding='utf-8')
    config_path = tmp_path / 'translator.yaml'
    with open(config_path, 'w', encoding='utf-8') as f:
        yaml.dump({"logging": {"log_file_path": str(blocker / 'run.log')}}, f)

    exit_code = cli.main(['-c', str(config_path), '-i', str(locale_dir / 'en.json'), '-l', 'de'])

    assert exit_code == 1
    assert "could not set up logging" in capsys.readouterr().err
    mocked_openai["create"].assert_not_called()


def test_language_is_required(capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(['-i', 'locales/en.json'])
    assert exc_info.value.code == 2


def test_version_flag(capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(['--version'])
    assert exc_info.value.code == 0
    assert cli.VERSION in capsys.readouterr().out
