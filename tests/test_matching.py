import unittest

from game import (
    RULES,
    CardFacts,
    Rule,
    dedupe_by_priority,
    exact_matches,
    find_matches,
    generate_palette,
    is_actionable,
    is_consecutive,
    palette_lookup,
    rule_named,
)

BY_ID = palette_lookup(generate_palette())


def cards(*ids):
    """CardFacts for swatch ids, placed on card-1, card-2, ..."""
    return [CardFacts.from_swatch(f"card-{i + 1}", BY_ID[sid]) for i, sid in enumerate(ids)]


def names(matches):
    return sorted(m.name for m in matches)


class TestRuleTable(unittest.TestCase):
    def test_given_rule_table_when_listed_then_thirteen_rules_with_expected_priorities(self):
        self.assertEqual(len(RULES), 13)
        self.assertEqual(rule_named("Complementary Duo").priority, 4)
        self.assertEqual(rule_named("Hue Triad").priority, 3)
        self.assertEqual(rule_named("Complementary Tetrad").priority, 2)
        self.assertEqual(rule_named("Grey Value Scale").priority, 1)
        with self.assertRaises(KeyError):
            rule_named("Rainbow")

    def test_given_hue_sets_when_testing_runs_then_wraparound_counts(self):
        self.assertTrue(is_consecutive({11, 0, 1}, 3))
        self.assertTrue(is_consecutive({3, 4, 5, 6}, 4))
        self.assertFalse(is_consecutive({0, 1, 3}, 3))
        self.assertFalse(is_consecutive({0, 2, 4, 6, 8}, 5))


class TestFindMatches(unittest.TestCase):
    def test_given_one_hue_at_levels_1_3_5_when_matching_then_monochrome_triad(self):
        sel = cards("h0-v1", "h0-v3", "h0-v5")
        matches = find_matches(sel)
        self.assertEqual(names(matches), ["Monochrome Triad"])
        self.assertEqual(matches[0].key, {"card-1", "card-2", "card-3"})

    def test_given_two_neutrals_at_same_level_when_matching_then_nothing(self):
        sel = [CardFacts("card-1", None, 2), CardFacts("card-2", None, 2)]
        self.assertEqual(find_matches(sel), [])
        self.assertEqual(find_matches(cards("n-v1", "n-v2")), [])

    def test_given_adjacent_hues_at_one_level_when_matching_then_analogous_triad(self):
        self.assertEqual(names(find_matches(cards("h0-v2", "h30-v2", "h60-v2"))), ["Analogous Triad"])
        self.assertEqual(names(find_matches(cards("h330-v4", "h0-v4", "h30-v4"))), ["Analogous Triad"])

    def test_given_adjacent_hues_at_mixed_levels_when_matching_then_nothing(self):
        self.assertEqual(find_matches(cards("h0-v2", "h30-v2", "h60-v3")), [])

    def test_given_opposite_hues_at_one_level_when_matching_then_complementary_duo(self):
        self.assertEqual(names(find_matches(cards("h0-v3", "h180-v3"))), ["Complementary Duo"])
        self.assertEqual(find_matches(cards("h0-v3", "h180-v2")), [])
        self.assertEqual(find_matches(cards("h0-v3", "h150-v3")), [])

    def test_given_hues_four_apart_when_matching_then_hue_triad(self):
        self.assertEqual(names(find_matches(cards("h0-v1", "h120-v1", "h240-v1"))), ["Hue Triad"])

    def test_given_hue_and_its_complements_neighbors_when_matching_then_split_complementary(self):
        self.assertEqual(names(find_matches(cards("h0-v4", "h150-v4", "h210-v4"))), ["Split Complementary Triad"])

    def test_given_neutrals_at_levels_1_3_5_when_matching_then_grey_scale_triad(self):
        self.assertEqual(names(find_matches(cards("n-v5", "n-v1", "n-v3"))), ["Grey Scale Triad"])

    def test_given_four_level_runs_when_matching_then_tetrads(self):
        self.assertIn("Monochrome Tetrad", names(find_matches(cards("h90-v2", "h90-v3", "h90-v4", "h90-v5"))))
        self.assertIn("Grey Scale Tetrad", names(find_matches(cards("n-v1", "n-v2", "n-v3", "n-v4"))))
        self.assertEqual(names(find_matches(cards("h90-v1", "h90-v2", "h90-v4", "h90-v5"))), [])

    def test_given_four_adjacent_hues_when_matching_then_analogous_tetrad(self):
        matches = exact_matches(cards("h270-v5", "h300-v5", "h330-v5", "h0-v5"))
        self.assertEqual(names(matches), ["Analogous Tetrad"])

    def test_given_two_complementary_pairs_when_matching_then_complementary_tetrad(self):
        sel = cards("h0-v2", "h180-v2", "h90-v2", "h270-v2")
        self.assertEqual(names(exact_matches(sel)), ["Complementary Tetrad"])
        # both pairs are also duos on their own
        self.assertEqual(names(find_matches(sel)).count("Complementary Duo"), 2)

    def test_given_full_value_scales_when_matching_then_scale_rules(self):
        self.assertEqual(names(exact_matches(cards("h210-v1", "h210-v2", "h210-v3", "h210-v4", "h210-v5"))),
                         ["Monochrome Value Scale"])
        self.assertEqual(names(exact_matches(cards("n-v1", "n-v2", "n-v3", "n-v4", "n-v5"))), ["Grey Value Scale"])
        self.assertEqual(names(exact_matches(cards("h300-v3", "h330-v3", "h0-v3", "h30-v3", "h60-v3"))),
                         ["Analogous Scale"])

    def test_given_selection_outside_two_to_five_when_matching_then_nothing(self):
        self.assertEqual(find_matches(cards("h0-v1")), [])
        six = cards("h0-v1", "h0-v2", "h0-v3", "h0-v4", "h0-v5", "h30-v1")
        self.assertEqual(find_matches(six), [])
        self.assertFalse(is_actionable(six))
        self.assertFalse(is_actionable([]))


class TestDeclareGating(unittest.TestCase):
    def test_given_exact_collection_when_checking_then_actionable(self):
        self.assertTrue(is_actionable(cards("h0-v1", "h0-v3", "h0-v5")))

    def test_given_collection_plus_stray_card_when_checking_then_not_actionable(self):
        sel = cards("h0-v1", "h0-v3", "h0-v5", "h90-v2")
        self.assertEqual(names(find_matches(sel)), ["Monochrome Triad"])
        self.assertFalse(is_actionable(sel))

    def test_given_part_of_a_collection_when_checking_then_not_actionable(self):
        self.assertFalse(is_actionable(cards("h0-v1", "h0-v3")))


class TestDedupe(unittest.TestCase):
    def test_given_weaker_and_stronger_rule_on_same_slots_when_deduping_then_stronger_kept(self):
        loose = Rule("Loose Quartet", 4, 3, lambda cs: True)
        sel = cards("h0-v1", "h30-v1", "h60-v1", "h90-v1")
        matches = find_matches(sel, rules=(loose,) + RULES)
        quartet = [m for m in matches if len(m.slot_ids) == 4]
        self.assertEqual(names(quartet), ["Analogous Tetrad", "Loose Quartet"])
        kept = [m for m in dedupe_by_priority(matches) if len(m.slot_ids) == 4]
        self.assertEqual(names(kept), ["Analogous Tetrad"])

    def test_given_value_scale_when_deduping_then_sub_collections_survive_separately(self):
        sel = cards("h120-v1", "h120-v2", "h120-v3", "h120-v4", "h120-v5")
        unique = dedupe_by_priority(find_matches(sel))
        self.assertEqual(
            names(unique),
            ["Monochrome Tetrad", "Monochrome Tetrad", "Monochrome Triad", "Monochrome Value Scale"],
        )
        self.assertEqual(len({m.key for m in unique}), 4)

    def test_given_equal_priorities_when_deduping_then_first_kept(self):
        a = Rule("First", 2, 4, lambda cs: True)
        b = Rule("Second", 2, 4, lambda cs: True)
        sel = cards("n-v1", "n-v2")
        kept = dedupe_by_priority(find_matches(sel, rules=(a, b)))
        self.assertEqual(names(kept), ["First"])


if __name__ == "__main__":
    unittest.main(verbosity=2)
