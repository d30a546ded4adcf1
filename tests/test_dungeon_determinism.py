import random

from dungeongen.dungeon import Dungeon, DungeonConfig, generate


def test_same_seed_same_dungeon():
    seed = 314159
    runs = [generate(DungeonConfig(seed=seed)) for _ in range(3)]
    maps = {r.to_ascii() for r in runs}
    assert len(maps) == 1
    assert len({tuple(r.rocks) for r in runs}) == 1
    assert len({(r.spawn, r.exit) for r in runs}) == 1
    assert len({len(r.dead_ends) for r in runs}) == 1


def test_seed_keyword_matches_config_seed():
    assert generate(seed=77).to_ascii() == generate(DungeonConfig(seed=77)).to_ascii()


def test_different_seeds_differ():
    assert generate(seed=1).to_ascii() != generate(seed=2).to_ascii()


def test_zero_is_a_real_seed():
    d = Dungeon(seed=0)
    assert d.seed == 0
    assert d.to_ascii() == generate(seed=0).to_ascii()


def test_unseeded_runs_pick_a_seed():
    d = Dungeon()
    assert isinstance(d.seed, int)
    assert generate(seed=d.seed).to_ascii() == d.to_ascii()


def test_generation_leaves_global_random_alone():
    random.seed(99)
    expected = [random.random() for _ in range(3)]
    random.seed(99)
    generate(seed=5)
    assert [random.random() for _ in range(3)] == expected


def test_regenerate_resets_state():
    d = Dungeon(seed=21)
    first = d.to_ascii()
    first_rocks = list(d.rocks)
    again = d.regenerate()
    assert again.to_ascii() == first
    assert again.rocks == first_rocks
    other = d.regenerate(seed=22)
    assert other.seed == 22
    assert other.config.seed == 22
    assert again.config.seed == 21
    assert other.to_ascii() == generate(seed=22).to_ascii()
    # earlier results are not mutated by a later run
    assert again.to_ascii() == first
