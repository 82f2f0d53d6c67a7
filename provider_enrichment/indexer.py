"""Simple TF-IDF indexer for looking up provider records by free text."""

from typing import List, Dict, Any, Optional, Mapping

from sklearn.feature_extraction.text import TfidfVectorizer
from sklearn.metrics.pairwise import linear_kernel

SEARCH_FIELDS = ("name", "city", "regionTag", "country", "policy", "caution")


def _document_text(record: Mapping[str, Any]) -> str:
    parts = [record.get(k) or "" for k in SEARCH_FIELDS]
    gmaps = record.get("gmaps") or {}
    if isinstance(gmaps, Mapping):
        parts.append(gmaps.get("formattedName") or "")
        parts.append(gmaps.get("formattedAddress") or "")
    return " \n ".join(str(p) for p in parts if p)


class ProviderIndexer:
    """A small TF-IDF based indexer over provider records.

    Useful for finding the ids of providers to re-run with `enrich --only`.
    """

    def __init__(self):
        self.vectorizer: Optional[TfidfVectorizer] = None
        self.doc_ids: List[str] = []
        self.docs: List[Mapping[str, Any]] = []
        self.tfidf_matrix = None

    def fit(self, records: List[Mapping[str, Any]]):
        """Fit the TF-IDF model from provider records."""
        self.docs = records
        self.doc_ids = [str(r.get("id", i)) for i, r in enumerate(records)]
        texts = [_document_text(r) for r in records]
        self.vectorizer = TfidfVectorizer(stop_words="english", ngram_range=(1, 2))
        self.tfidf_matrix = self.vectorizer.fit_transform(texts)

    def search(self, query: str, top_k: int = 5) -> List[Dict[str, Any]]:
        """Return up to top_k matching records as {'id','name','city','country','score'}.

        Records with no overlap with the query are left out.
        """
        if self.vectorizer is None or self.tfidf_matrix is None:
            raise RuntimeError("Index has not been fitted yet")

        q_vec = self.vectorizer.transform([query])
        cosine_similarities = linear_kernel(q_vec, self.tfidf_matrix).flatten()
        top_indices = cosine_similarities.argsort()[::-1][:top_k]
        results = []
        for idx in top_indices:
            score = float(cosine_similarities[idx])
            if score <= 0:
                continue
            doc = self.docs[idx]
            results.append(
                {
                    "id": self.doc_ids[idx],
                    "name": doc.get("name"),
                    "city": doc.get("city"),
                    "country": doc.get("country"),
                    "score": score,
                }
            )
        return results
