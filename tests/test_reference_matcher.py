import unittest

from pinegen.config.settings import LIBRARY_DIR
from pinegen.core.models.template import Template, TemplateSource
from pinegen.core.services.reference_matcher import (
    MATCH_THRESHOLD,
    NAME_BONUS,
    ReferenceMatcher,
    normalize_score,
    score_template,
)
from pinegen.core.services.template_library import TemplateLibrary


def make_template(template_id, keywords, categories=(), name=None):
    return Template(
        id=template_id,
        name=name or f"Unit {template_id}",
        author="Unit",
        source=TemplateSource.TRADINGVIEW_COMMUNITY,
        keywords=tuple(keywords),
        categories=tuple(categories),
        code='//@version=6\nindicator("Unit")\nplot(close)',
        description="unit template",
    )


class ScoreTemplateTests(unittest.TestCase):
    def test_phrase_and_word_points(self):
        template = make_template("t", ["rsi", "bullish divergence"], ["momentum"], name="Zeta")
        self.assertEqual(score_template(template, "Bullish Divergence on RSI"), 5)

    def test_partial_word_match_scores_one_per_word(self):
        template = make_template("t", ["moving average"])
        self.assertEqual(score_template(template, "average"), 1)

    def test_partial_match_is_bidirectional(self):
        template = make_template("t", ["stoch rsi"])
        # "stoch" is contained in the prompt token "stochastics"
        self.assertEqual(score_template(template, "stochastics"), 1)
        # the prompt token "div" is contained in "divergence"
        template = make_template("t", ["hidden divergence"])
        self.assertEqual(score_template(template, "div"), 1)

    def test_category_points(self):
        template = make_template("t", ["zzqa"], ["trend", "overlay"])
        self.assertEqual(score_template(template, "an overlay for trend"), 2)

    def test_name_bonus(self):
        template = make_template("t", ["alpha"], ["trend"], name="Alpha Trend")
        without_name = score_template(template, "show me")
        with_name = score_template(template, "show me Alpha Trend")
        self.assertEqual(without_name, 0)
        self.assertGreaterEqual(with_name - without_name, NAME_BONUS)

    def test_empty_prompt_scores_zero(self):
        template = make_template("t", ["rsi", "macd"], ["momentum"])
        self.assertEqual(score_template(template, ""), 0)
        self.assertEqual(score_template(template, "   "), 0)

    def test_normalized_score_is_capped(self):
        template = make_template("t", ["a b"], ["c"], name="N")
        raw = score_template(template, "a b c n")
        self.assertEqual(raw, 9)
        self.assertEqual(normalize_score(raw, template), 1.0)

    def test_normalized_score_without_keywords_is_zero(self):
        template = make_template("t", [])
        self.assertEqual(normalize_score(3, template), 0.0)


class ReferenceMatcherTests(unittest.TestCase):
    def test_threshold_is_inclusive(self):
        keywords = [f"keyword{i}" for i in range(9)]
        matcher = ReferenceMatcher(TemplateLibrary([make_template("edge", keywords, ["c0"])]))

        result = matcher.match("c0")

        self.assertEqual(result.score, MATCH_THRESHOLD)
        self.assertIsNotNone(result.best_match)

    def test_below_threshold_has_no_match(self):
        keywords = [f"keyword{i}" for i in range(10)]
        matcher = ReferenceMatcher(TemplateLibrary([make_template("edge", keywords, ["c0"])]))

        result = matcher.match("c0")

        self.assertLess(result.score, MATCH_THRESHOLD)
        self.assertIsNone(result.best_match)
        self.assertFalse(result.matched)
        self.assertEqual(result.alternates, ())

    def test_ranking_and_alternates(self):
        dummies = ["zzqa", "zzqb", "zzqc", "zzqd"]
        templates = [make_template(f"t{k}", ["trend"] + dummies[:k]) for k in (3, 0, 4, 1, 2)]
        matcher = ReferenceMatcher(TemplateLibrary(templates))

        result = matcher.match("trend")

        self.assertEqual(result.best_match.id, "t0")
        self.assertEqual(result.score, 1.0)
        self.assertEqual([s.template.id for s in result.alternates], ["t1", "t2", "t3"])
        scores = [s.score for s in result.alternates]
        self.assertEqual(scores, sorted(scores, reverse=True))

    def test_ties_keep_library_order(self):
        templates = [make_template("first", ["macd"]), make_template("second", ["macd"])]
        matcher = ReferenceMatcher(TemplateLibrary(templates))

        result = matcher.match("macd")

        self.assertEqual(result.best_match.id, "first")
        self.assertEqual([s.template.id for s in result.alternates], ["second"])

    def test_empty_library(self):
        result = ReferenceMatcher(TemplateLibrary()).match("rsi")
        self.assertIsNone(result.best_match)
        self.assertEqual(result.score, 0.0)

    def test_to_dict(self):
        matcher = ReferenceMatcher(TemplateLibrary([make_template("only", ["vwap"])]))
        data = matcher.match("vwap").to_dict()
        self.assertEqual(data, {"bestMatch": "only", "score": 1.0, "alternates": []})


class LibraryMatchTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.matcher = ReferenceMatcher(TemplateLibrary.load(LIBRARY_DIR))

    def test_rsi_divergence_prompt(self):
        result = self.matcher.match("rsi divergence overbought oversold")

        self.assertIsNotNone(result.best_match)
        self.assertEqual(result.best_match.id, "rsi-divergence")
        self.assertAlmostEqual(result.score, 0.5)

    def test_scores_stay_in_unit_interval(self):
        prompts = [
            "",
            "x",
            "smart money concepts (smc) order block fair value gap fvg bos choch",
            "Ichimoku Cloud kumo tenkan kijun senkou chikou cloud trend overlay",
            "a e i o u",
            "ฉันต้องการ indicator สำหรับ rsi",
        ]
        for prompt in prompts:
            for scored in self.matcher.rank(prompt):
                self.assertGreaterEqual(scored.score, 0.0)
                self.assertLessEqual(scored.score, 1.0)

    def test_alternates_exclude_best(self):
        result = self.matcher.match("trend momentum oscillator overbought oversold rsi macd")

        self.assertIsNotNone(result.best_match)
        self.assertLessEqual(len(result.alternates), 3)
        self.assertNotIn(result.best_match.id, [s.template.id for s in result.alternates])
        for alt in result.alternates:
            self.assertGreaterEqual(alt.score, MATCH_THRESHOLD)
            self.assertLessEqual(alt.score, result.score)

    def test_name_in_prompt_matches_template(self):
        result = self.matcher.match("please build the Ichimoku Cloud")
        self.assertEqual(result.best_match.id, "ichimoku-cloud")

    def test_empty_prompt_has_no_match(self):
        result = self.matcher.match("")
        self.assertIsNone(result.best_match)
        self.assertEqual(result.score, 0.0)


if __name__ == "__main__":
    unittest.main()
