import logging
import re

import requests

from newsroom.models import Article
from newsroom.schemas import ArticleSummary

logger = logging.getLogger(__name__)

SUMMARY_MODEL = "facebook/bart-large-cnn"
SUMMARY_MAX_LENGTH = 130  # tokens
SUMMARY_MIN_LENGTH = 30
FETCH_TIMEOUT_SECONDS = 10
MAX_INPUT_CHARS = 4000  # the model reads ~1024 tokens, no point sending a whole page


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def html_to_text(html: str) -> str:
    """Reduce an HTML page to plain text: scripts and tags dropped, whitespace collapsed."""
    text = re.sub(r"<(script|style)[^>]*>.*?</\1>", " ", html or "", flags=re.IGNORECASE | re.DOTALL)
    text = re.sub(r"<[^>]+>", " ", text)
    return re.sub(r"\s+", " ", text).strip()


class ArticleSummarizer:
    """
    Summarizes an article's page with an abstractive summarization model.
    The model is loaded lazily on the first summarization call.

    Summarization never fails the request: if the page can't be fetched or the
    model errors, the article's description (or its title) is returned instead.
    """

    def __init__(self):
        self._pipeline = None  # loaded on first use to keep startup fast

    def _get_pipeline(self):
        """Load and cache the summarization pipeline on first call."""
        if self._pipeline is None:
            from transformers import pipeline  # imported here to defer heavy load
            logger.info(f"Loading summarization model {SUMMARY_MODEL} (first use, this may take a moment)...")
            self._pipeline = pipeline("summarization", model=SUMMARY_MODEL)
            logger.info("Summarization model loaded")
        return self._pipeline

    def _fetch_text(self, url: str) -> str:
        response = requests.get(url, timeout=FETCH_TIMEOUT_SECONDS)
        response.raise_for_status()
        return html_to_text(response.text)

    def summarize(self, article: Article) -> ArticleSummary:
        """
        Summarize the page behind article.url.

        Returns:
            ArticleSummary with summarized=True when the model produced the text,
            or summarized=False with the description/title fallback
        """
        try:
            if not article.url:
                raise ValueError("article has no url")
            text = self._fetch_text(article.url)
            if not text:
                raise ValueError("article page has no text")

            pipe = self._get_pipeline()
            result = pipe(
                text[:MAX_INPUT_CHARS],
                max_length=SUMMARY_MAX_LENGTH,
                min_length=SUMMARY_MIN_LENGTH,
                truncation=True,
            )
            summary = result[0]["summary_text"].strip()
            logger.info(f"[summarizer] '{article.title[:60]}' summarized ({len(text)} chars -> {len(summary)})")
            return ArticleSummary(article_id=article.id, summary=summary, summarized=True)

        except Exception as e:
            logger.error(f"Summarization failed for article '{article.id}': {e}")
            return ArticleSummary(
                article_id=article.id,
                summary=article.description or article.title,
                summarized=False,
            )


# Shared instance so the model is loaded once per process
summarizer = ArticleSummarizer()
