"""
Unit tests for image prompt sanitization and result helpers.
"""

import base64

import pytest

from shared.errors import AllModelsExhaustedError, InvalidPromptError
from shared.image_utils import (
    AttemptOutcome,
    ImageAttempt,
    ImageResult,
    MAX_PROMPT_LENGTH,
    exhausted_error,
    sanitize_image_prompt,
    strip_prompt_preamble,
    to_data_uri,
)


class TestStripPromptPreamble:
    """Tests for strip_prompt_preamble()"""

    def test_here_is_the_prompt(self):
        """Intro of the form Here is the prompt: is removed."""
        raw = 'Here is the prompt: A cat on a roof, digital art'
        assert strip_prompt_preamble(raw) == 'A cat on a roof, digital art'

    @pytest.mark.parametrize('raw', [
        'Prompt: A cat on a roof, digital art',
        'Image prompt: A cat on a roof, digital art',
        'The prompt is: A cat on a roof, digital art',
        "here's the image prompt: A cat on a roof, digital art",
        'THIS IS the prompt - A cat on a roof, digital art',
    ])
    def test_intro_variants(self, raw):
        """Common intro phrasings are removed."""
        assert strip_prompt_preamble(raw) == 'A cat on a roof, digital art'

    def test_leading_non_letters_removed(self):
        """Leading punctuation and quotes are removed."""
        assert strip_prompt_preamble('**"A cat on a roof"**') == 'A cat on a roof"**'

    def test_word_starting_with_prompt_kept(self):
        """A word that merely starts with "prompt" is kept."""
        raw = 'Prompting robots paint a sunset over the sea'
        assert strip_prompt_preamble(raw) == raw

    def test_too_short_reverts_to_original(self):
        """Result under the minimum length reverts to the original."""
        assert strip_prompt_preamble('...') == '...'

    def test_short_after_prefix_reverts(self):
        """Stripping that leaves too little keeps the original."""
        assert strip_prompt_preamble('Prompt: cat') == 'Prompt: cat'


class TestSanitizeImagePrompt:
    """Tests for sanitize_image_prompt()"""

    def test_intro_removed(self):
        """Intro is removed by the full sanitizer."""
        raw = 'Here is the prompt: A cat on a roof, digital art'
        assert sanitize_image_prompt(raw) == 'A cat on a roof, digital art'

    def test_non_ascii_removed(self):
        """Characters outside printable ASCII are dropped."""
        raw = 'A cat on a roof — digital art, кот\x07'
        assert sanitize_image_prompt(raw) == 'A cat on a roof  digital art,'

    def test_newlines_kept(self):
        """Newlines survive sanitizing."""
        raw = 'A cat on a roof,\ndigital art'
        assert sanitize_image_prompt(raw) == raw

    def test_truncated(self):
        """Prompt is cut to the maximum length."""
        raw = 'A ' + 'very ' * 200 + 'long prompt'
        assert len(sanitize_image_prompt(raw)) == MAX_PROMPT_LENGTH

    def test_only_dots_rejected(self):
        """Prompt made only of dots is rejected."""
        with pytest.raises(InvalidPromptError):
            sanitize_image_prompt('...')

    def test_empty_rejected(self):
        """Empty prompt is rejected."""
        with pytest.raises(InvalidPromptError):
            sanitize_image_prompt('')

    def test_only_cyrillic_rejected(self):
        """Prompt with no ASCII letters is rejected."""
        with pytest.raises(InvalidPromptError):
            sanitize_image_prompt('Кот сидит на крыше, цифровой арт')


class TestToDataUri:

    def test_default_mime(self):
        """Missing MIME type defaults to PNG."""
        assert to_data_uri(b'abc') == 'data:image/png;base64,' + base64.b64encode(b'abc').decode()

    def test_explicit_mime(self):
        """Given MIME type is used in the URI."""
        assert to_data_uri(b'abc', 'image/jpeg').startswith('data:image/jpeg;base64,')


class TestImageResult:

    def test_to_dict(self):
        """Serialized keys are image, prompt and model."""
        result = ImageResult(image_data_uri='data:x', prompt_used='p', model_used='m')
        assert result.to_dict() == {'image': 'data:x', 'prompt': 'p', 'model': 'm'}


class TestExhaustedError:
    """Tests for exhausted_error()"""

    def _attempt(self, status, error='failed'):
        return ImageAttempt(model='m', outcome=AttemptOutcome.RETRYABLE, status=status, error=error)

    def test_last_503_is_transient(self):
        """Last failure 503 asks the caller to retry."""
        error = exhausted_error([self._attempt(404), self._attempt(503)])
        assert isinstance(error, AllModelsExhaustedError)
        assert error.status_code == 503
        assert 'попробуйте' in error.message

    def test_last_404_is_not_found(self):
        """Last failure 404 reports a missing model."""
        error = exhausted_error([self._attempt(503), self._attempt(404)])
        assert error.status_code == 404

    def test_last_410_maps_to_not_found(self):
        """410 is reported the same way as 404."""
        assert exhausted_error([self._attempt(410)]).status_code == 404

    def test_last_403_is_permission(self):
        """403 explains the token permission needed."""
        error = exhausted_error([self._attempt(403)])
        assert error.status_code == 403
        assert 'Inference Providers' in error.message

    def test_other_status_is_500(self):
        """Other statuses become 500 with upstream detail."""
        error = exhausted_error([self._attempt(422, error='bad input')])
        assert error.status_code == 500
        assert 'bad input' in error.message
        assert error.upstream_status == 422

    def test_transport_error_is_500(self):
        """Transport failure becomes 500 and keeps the attempt."""
        error = exhausted_error([self._attempt(None, error='connection reset')])
        assert error.status_code == 500
        assert error.last_error.error == 'connection reset'

    def test_no_attempts(self):
        """No candidates at all is a 500."""
        error = exhausted_error([])
        assert error.status_code == 500
        assert error.last_error is None
