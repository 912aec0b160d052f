from __future__ import annotations

from typing import Mapping, Optional

from lowborn.domain.models.night import NightEventCard, NightEventTag, SceneType

PATROL = SceneType.PATROL
CAMP = SceneType.CAMP

MUNDANE = NightEventTag.MUNDANE
AMBIGUOUS = NightEventTag.AMBIGUOUS
HAZARD = NightEventTag.HAZARD
INTERNAL = NightEventTag.INTERNAL
SHOCK = NightEventTag.SHOCK

QUIET_OBSERVATIONS = ("nothing unusual", "nothing unusual", "tracks in snow")
UNCERTAIN_OBSERVATIONS = ("tracks in snow", "distant light", "howl", "nothing unusual")
DANGER_OBSERVATIONS = ("tracks in snow", "howl", "missing man", "strange symbol")
CAMP_ROUTE = ("The inner loop between the mess tents and the gate.",)


def _card(
    card_id: str,
    scene_type: SceneType,
    title: str,
    outcome: str,
    tags: tuple,
    routes: tuple = CAMP_ROUTE,
    player: Optional[Mapping[str, int]] = None,
    camp: Optional[Mapping[str, int]] = None,
    observations: tuple = QUIET_OBSERVATIONS,
) -> NightEventCard:
    return NightEventCard(
        id=card_id,
        scene_type=scene_type,
        title=title,
        outcome=outcome,
        tags=tags,
        route_templates=routes,
        base_player_delta=dict(player or {}),
        base_camp_delta=dict(camp or {}),
        observation_pool=observations,
    )


MUNDANE_CARDS = (
    _card(
        "patrol-frozen-fence",
        PATROL,
        "Frozen Fence Line",
        "A stretch of the fence has iced over, but every post still stands.",
        (MUNDANE,),
        ("You walk the fence from the east gate to the cairn.", "The fence line bends toward the birch stand."),
        player={"warmth": -1},
        camp={"supplies": 1},
    ),
    _card(
        "patrol-quiet-ridge",
        PATROL,
        "Quiet Ridge",
        "The ridge is empty. Only your own breath fogs the lantern glass.",
        (MUNDANE,),
        ("You climb the switchback to the ridge lookout.",),
        player={"stamina": -1, "sanity": 1},
    ),
    _card(
        "patrol-stray-goat",
        PATROL,
        "Stray Goat",
        "A goat from the village pens wandered past the markers. You lead it back.",
        (MUNDANE,),
        ("You follow the stream bed toward the village pens.",),
        camp={"morale": 1, "supplies": 1},
    ),
    _card(
        "patrol-snow-drift",
        PATROL,
        "Snow Drift on the Trail",
        "A drift blocks the lower trail. You dig a path and move on.",
        (MUNDANE,),
        ("You take the lower trail past the frozen pond.",),
        player={"stamina": -2},
    ),
    _card(
        "patrol-broken-lantern",
        PATROL,
        "Cracked Lantern",
        "Your lantern glass cracks in the cold. You finish the loop by moonlight.",
        (MUNDANE,),
        ("You circle the outer stakes counterclockwise.",),
        player={"warmth": -1},
        camp={"supplies": -1},
    ),
    _card(
        "patrol-woodcutters-camp",
        PATROL,
        "Abandoned Woodcutter Fire",
        "Old ashes from a woodcutter's fire, cold for days.",
        (MUNDANE,),
        ("You cut through the logging clearing.",),
        observations=("nothing unusual", "tracks in snow"),
    ),
    _card(
        "patrol-owl-call",
        PATROL,
        "Owl Calls",
        "Owls trade calls across the valley. Nothing else stirs.",
        (MUNDANE,),
        ("You hold the valley rim path.",),
        player={"sanity": 1},
    ),
    _card(
        "patrol-marker-repair",
        PATROL,
        "Leaning Marker",
        "A route marker leans in the wind. You reset it and pack the snow.",
        (MUNDANE,),
        ("You walk the marker line north of the watchtower.",),
        player={"stamina": -1},
        camp={"discipline": 1},
    ),
    _card(
        "patrol-clear-sky",
        PATROL,
        "Clear Sky",
        "The cloud breaks and the whole valley lies still under starlight.",
        (MUNDANE,),
        ("You take the long loop around the south pasture.",),
        player={"sanity": 2},
    ),
    _card(
        "patrol-rabbit-tracks",
        PATROL,
        "Rabbit Runs",
        "Rabbit tracks crisscross the path. Small prints, nothing more.",
        (MUNDANE,),
        ("You follow the hedge line past the old mill.",),
        observations=("tracks in snow", "nothing unusual"),
    ),
    _card(
        "camp-stew-night",
        CAMP,
        "Thick Stew",
        "The cook found extra barley. The hall eats well tonight.",
        (MUNDANE,),
        player={"hunger": -2},
        camp={"morale": 1, "supplies": -1},
    ),
    _card(
        "camp-boot-mending",
        CAMP,
        "Boot Mending",
        "You spend the evening stitching boot leather by the stove.",
        (MUNDANE,),
        player={"warmth": 1},
        camp={"supplies": 1},
    ),
    _card(
        "camp-dice-game",
        CAMP,
        "Dice in the Barracks",
        "A quiet dice game runs late. Nobody argues over the stakes.",
        (MUNDANE,),
        camp={"morale": 2},
    ),
    _card(
        "camp-roster-check",
        CAMP,
        "Roster Check",
        "The sergeant reads the roster twice. Every name answers.",
        (MUNDANE,),
        camp={"discipline": 2},
    ),
    _card(
        "camp-stove-smoke",
        CAMP,
        "Smoking Stove",
        "The barracks stove smokes until someone clears the flue.",
        (MUNDANE,),
        player={"warmth": -1},
        camp={"morale": -1},
    ),
    _card(
        "camp-letter-home",
        CAMP,
        "Letters Home",
        "A courier takes the week's letters. The mood softens.",
        (MUNDANE,),
        player={"sanity": 1},
        camp={"morale": 1},
    ),
    _card(
        "camp-inventory",
        CAMP,
        "Storeroom Count",
        "The quartermaster counts sacks and finds the tally correct.",
        (MUNDANE,),
        camp={"supplies": 1, "discipline": 1},
    ),
    _card(
        "camp-early-sleep",
        CAMP,
        "Early Lights Out",
        "The hall goes quiet early. You sleep through to the bell.",
        (MUNDANE,),
        player={"stamina": 2, "sanity": 1},
    ),
    _card(
        "camp-sharpening",
        CAMP,
        "Whetstone Evening",
        "Blades are sharpened and oiled in rows along the bench.",
        (MUNDANE,),
        camp={"discipline": 1},
    ),
    _card(
        "camp-songs",
        CAMP,
        "Low Songs",
        "Someone hums an old border song and half the hall joins in.",
        (MUNDANE,),
        camp={"morale": 2, "rumor": -1},
    ),
)

AMBIGUOUS_CARDS = (
    _card(
        "patrol-distant-lantern",
        PATROL,
        "Distant Lantern",
        "A light bobs on the far slope, then goes out.",
        (AMBIGUOUS,),
        ("You hold the north slope path.", "You walk the cairn line toward the pass."),
        player={"sanity": -1},
        camp={"rumor": 1},
        observations=("distant light", "nothing unusual", "distant light"),
    ),
    _card(
        "patrol-doubled-tracks",
        PATROL,
        "Doubled Tracks",
        "Two sets of prints run side by side, then one set simply ends.",
        (AMBIGUOUS,),
        ("You trace the stream toward the birch stand.",),
        player={"sanity": -2},
        observations=("tracks in snow", "tracks in snow", "strange symbol"),
    ),
    _card(
        "patrol-ridge-howl",
        PATROL,
        "Howl from the Ridge",
        "A long howl rolls down from the ridge. It does not sound like a wolf.",
        (AMBIGUOUS,),
        ("You climb toward the ridge lookout.",),
        player={"sanity": -1},
        camp={"rumor": 1},
        observations=("howl", "howl", "nothing unusual"),
    ),
    _card(
        "patrol-carved-post",
        PATROL,
        "Carved Post",
        "A fresh mark is cut into a marker post. Nobody on the roster carves.",
        (AMBIGUOUS,),
        ("You walk the marker line past the cairn.",),
        camp={"rumor": 2},
        observations=("strange symbol", "strange symbol", "tracks in snow"),
    ),
    _card(
        "patrol-silent-birds",
        PATROL,
        "Silent Birds",
        "The crows that roost by the mill have gone quiet all at once.",
        (AMBIGUOUS,),
        ("You follow the hedge line to the old mill.",),
        player={"sanity": -1},
        observations=UNCERTAIN_OBSERVATIONS,
    ),
    _card(
        "patrol-warm-ash",
        PATROL,
        "Warm Ash",
        "A fire pit off the trail is still warm. No one is in sight.",
        (AMBIGUOUS,),
        ("You cut through the logging clearing.",),
        camp={"rumor": 1},
        observations=("tracks in snow", "distant light", "nothing unusual"),
    ),
    _card(
        "patrol-dropped-glove",
        PATROL,
        "Dropped Glove",
        "A camp-issue glove lies in the snow far past the last marker.",
        (AMBIGUOUS,),
        ("You push past the last marker toward the pass.",),
        camp={"rumor": 1, "morale": -1},
        observations=("missing man", "tracks in snow", "nothing unusual"),
    ),
    _card(
        "patrol-echo-voice",
        PATROL,
        "Echoed Voice",
        "A voice calls once from the gorge. When you answer, nothing replies.",
        (AMBIGUOUS,),
        ("You walk the gorge rim above the river.",),
        player={"sanity": -2},
        observations=("howl", "nothing unusual", "missing man"),
    ),
    _card(
        "camp-late-knock",
        CAMP,
        "Late Knock",
        "Someone knocks on the barracks door after curfew. The step outside is empty.",
        (AMBIGUOUS,),
        player={"sanity": -1},
        camp={"rumor": 1},
        observations=UNCERTAIN_OBSERVATIONS,
    ),
    _card(
        "camp-missing-rations",
        CAMP,
        "Short Rations",
        "Two ration sacks are missing from a locked store.",
        (AMBIGUOUS,),
        camp={"supplies": -2, "rumor": 1},
        observations=("nothing unusual", "missing man", "tracks in snow"),
    ),
    _card(
        "camp-chalk-mark",
        CAMP,
        "Chalk Mark",
        "A symbol nobody recognizes is chalked on the armory door.",
        (AMBIGUOUS,),
        camp={"rumor": 2},
        observations=("strange symbol", "nothing unusual"),
    ),
    _card(
        "camp-signal-fire",
        CAMP,
        "Unanswered Signal",
        "The north tower lit a signal fire, then let it die without a message.",
        (AMBIGUOUS,),
        camp={"discipline": -1, "rumor": 1},
        observations=("distant light", "nothing unusual"),
    ),
    _card(
        "camp-dog-barking",
        CAMP,
        "Dogs at the Gate",
        "The camp dogs bark at the gate for an hour and will not settle.",
        (AMBIGUOUS,),
        player={"stamina": -1},
        camp={"rumor": 1},
        observations=("howl", "tracks in snow", "nothing unusual"),
    ),
    _card(
        "camp-open-gate",
        CAMP,
        "Gate Left Open",
        "The side gate is found open at midnight. The bar shows no damage.",
        (AMBIGUOUS,),
        camp={"discipline": -1},
        observations=("tracks in snow", "nothing unusual"),
    ),
    _card(
        "camp-whispered-name",
        CAMP,
        "Whispered Name",
        "Two sentries swear they heard a dead comrade's name at the fence.",
        (AMBIGUOUS,),
        player={"sanity": -1},
        camp={"morale": -1, "rumor": 1},
        observations=("howl", "missing man", "nothing unusual"),
    ),
)

HAZARD_CARDS = (
    _card(
        "patrol-thin-ice",
        PATROL,
        "Thin Ice",
        "The pond crust gives way under your boot. You haul yourself out soaked.",
        (HAZARD,),
        ("You take the shortcut across the frozen pond.",),
        player={"warmth": -4, "injury": 2},
        observations=("nothing unusual", "tracks in snow"),
    ),
    _card(
        "patrol-rockfall",
        PATROL,
        "Rockfall",
        "Loose stone slides from the cut above the trail and clips your shoulder.",
        (HAZARD,),
        ("You walk the gorge cut below the cliffs.",),
        player={"injury": 3, "stamina": -2},
        observations=("nothing unusual", "howl"),
    ),
    _card(
        "patrol-whiteout",
        PATROL,
        "Whiteout",
        "Snow closes in until you cannot see your own lantern arm.",
        (HAZARD,),
        ("You push across the open pasture.",),
        player={"warmth": -3, "stamina": -3},
        camp={"morale": -1},
        observations=("distant light", "nothing unusual", "tracks in snow"),
    ),
    _card(
        "patrol-snare-trap",
        PATROL,
        "Snare in the Brush",
        "A poacher's snare bites into your ankle before you spot it.",
        (HAZARD,),
        ("You shadow the hedge line through the brush.",),
        player={"injury": 3},
        observations=("tracks in snow", "strange symbol"),
    ),
    _card(
        "patrol-wolf-pack",
        PATROL,
        "Wolves on the Flank",
        "A pack paces you along the ridge until a thrown torch scatters them.",
        (HAZARD,),
        ("You hold the ridge path toward the pass.",),
        player={"stamina": -3, "sanity": -2, "injury": 1},
        observations=("howl", "tracks in snow", "howl"),
    ),
    _card(
        "patrol-collapsed-bridge",
        PATROL,
        "Collapsed Footbridge",
        "The footbridge over the stream has dropped into the water. You wade across.",
        (HAZARD,),
        ("You head for the footbridge below the mill.",),
        player={"warmth": -3, "injury": 1},
        camp={"supplies": -1},
        observations=("nothing unusual", "tracks in snow"),
    ),
    _card(
        "camp-stove-fire",
        CAMP,
        "Stove Fire",
        "A spark catches the bedding. The fire is out but the bunk is ruined.",
        (HAZARD,),
        player={"warmth": -2, "injury": 1},
        camp={"supplies": -3, "morale": -1},
        observations=("nothing unusual", "distant light"),
    ),
    _card(
        "camp-roof-collapse",
        CAMP,
        "Sagging Roof",
        "Snow load cracks a barracks beam. Everyone sleeps in the hall.",
        (HAZARD,),
        player={"stamina": -2},
        camp={"supplies": -2, "morale": -2},
        observations=("nothing unusual",),
    ),
    _card(
        "camp-spoiled-stores",
        CAMP,
        "Spoiled Stores",
        "Meltwater seeped into the flour. Half the sacks are lost.",
        (HAZARD,),
        player={"hunger": 3},
        camp={"supplies": -4},
        observations=("nothing unusual", "strange symbol"),
    ),
    _card(
        "camp-fever",
        CAMP,
        "Barracks Fever",
        "A fever moves through the bunks. The sick list doubles overnight.",
        (HAZARD,),
        player={"stamina": -2, "injury": 1},
        camp={"discipline": -1, "morale": -2},
        observations=("nothing unusual", "missing man"),
    ),
)

INTERNAL_CARDS = (
    _card(
        "patrol-partner-refuses",
        PATROL,
        "Partner Refuses the Loop",
        "Your patrol partner stops at the last marker and will not go further.",
        (INTERNAL,),
        ("You walk the outer loop with a second watcher.",),
        player={"stamina": -1},
        camp={"discipline": -2},
        observations=("nothing unusual", "howl", "distant light"),
    ),
    _card(
        "patrol-stolen-flask",
        PATROL,
        "Flask on the Trail",
        "A camp flask of stolen spirit sits in a hollow by the path.",
        (INTERNAL,),
        ("You check the hollows along the stream.",),
        camp={"discipline": -1, "supplies": -1},
        observations=("nothing unusual", "tracks in snow"),
    ),
    _card(
        "patrol-false-relief",
        PATROL,
        "Missed Relief",
        "Your relief never arrives. You stand the extra hour alone.",
        (INTERNAL,),
        ("You hold the watch post above the gate road.",),
        player={"warmth": -2, "stamina": -2},
        camp={"discipline": -1},
        observations=("nothing unusual", "distant light"),
    ),
    _card(
        "camp-brawl",
        CAMP,
        "Barracks Brawl",
        "Two watchers trade blows over a bunk. The sergeant breaks it up late.",
        (INTERNAL,),
        camp={"discipline": -2, "morale": -1},
        observations=("nothing unusual",),
    ),
    _card(
        "camp-hoarding",
        CAMP,
        "Hoarded Bread",
        "Bread is found under a mattress. Someone has been skimming rations.",
        (INTERNAL,),
        camp={"supplies": -2, "discipline": -1, "rumor": 1},
        observations=("nothing unusual", "missing man"),
    ),
    _card(
        "camp-desertion-talk",
        CAMP,
        "Desertion Talk",
        "Whispers about walking south before the thaw pass from bunk to bunk.",
        (INTERNAL,),
        camp={"morale": -2, "rumor": 2},
        observations=("nothing unusual", "missing man", "distant light"),
    ),
    _card(
        "camp-sergeant-favor",
        CAMP,
        "Sergeant's Favorites",
        "The duty board shows the same names on rest three nights running.",
        (INTERNAL,),
        camp={"discipline": -1, "morale": -2},
        observations=("nothing unusual",),
    ),
    _card(
        "camp-gambling-debt",
        CAMP,
        "Gambling Debt",
        "A debt from the dice table turns into a shouting match at the stove.",
        (INTERNAL,),
        camp={"morale": -1, "discipline": -1, "rumor": 1},
        observations=("nothing unusual",),
    ),
    _card(
        "camp-nightmare",
        CAMP,
        "Shared Nightmare",
        "Three watchers wake screaming about the same shape at the fence.",
        (INTERNAL, AMBIGUOUS),
        player={"sanity": -2},
        camp={"morale": -1, "rumor": 2},
        observations=("strange symbol", "howl", "nothing unusual"),
    ),
    _card(
        "camp-insubordination",
        CAMP,
        "Open Insubordination",
        "A scout tears down the duty board and calls the orders a death list.",
        (INTERNAL,),
        camp={"discipline": -3, "rumor": 1},
        observations=("nothing unusual", "missing man"),
    ),
)

SHOCK_CARDS = (
    _card(
        "patrol-empty-post",
        PATROL,
        "Empty Watch Post",
        "The outer post is empty. The sentry's spear is driven into the snow.",
        (SHOCK, AMBIGUOUS),
        ("You walk the marker line to the outer post.",),
        player={"sanity": -4},
        camp={"morale": -2, "rumor": 3},
        observations=("missing man", "tracks in snow", "strange symbol"),
    ),
    _card(
        "patrol-blood-trail",
        PATROL,
        "Blood in the Snow",
        "A dark trail runs from the treeline and stops in open ground.",
        (SHOCK, HAZARD),
        ("You follow the treeline toward the pass.",),
        player={"sanity": -3, "stamina": -2},
        camp={"rumor": 2},
        observations=DANGER_OBSERVATIONS,
    ),
    _card(
        "patrol-circle-of-stones",
        PATROL,
        "Circle of Stones",
        "Stones ring the trail where there were none yesterday, each one scratched.",
        (SHOCK, AMBIGUOUS),
        ("You take the ridge loop past the cairn.",),
        player={"sanity": -4},
        camp={"rumor": 3},
        observations=("strange symbol", "strange symbol", "tracks in snow"),
    ),
    _card(
        "camp-empty-bunk",
        CAMP,
        "Empty Bunk",
        "At the dawn count one bunk is empty and the blanket is still warm.",
        (SHOCK, INTERNAL),
        player={"sanity": -3},
        camp={"morale": -3, "rumor": 3},
        observations=("missing man", "tracks in snow", "nothing unusual"),
    ),
    _card(
        "camp-burned-sign",
        CAMP,
        "Burned Sign",
        "Someone burned a symbol into the gate beam during the night watch.",
        (SHOCK, AMBIGUOUS),
        player={"sanity": -2},
        camp={"discipline": -2, "rumor": 3},
        observations=("strange symbol", "distant light"),
    ),
)

EVENT_CARD_CATALOG = {
    "mundane": MUNDANE_CARDS,
    "ambiguous": AMBIGUOUS_CARDS,
    "hazard": HAZARD_CARDS,
    "internal": INTERNAL_CARDS,
    "shock": SHOCK_CARDS,
}

NIGHT_EVENT_CARDS = MUNDANE_CARDS + AMBIGUOUS_CARDS + HAZARD_CARDS + INTERNAL_CARDS + SHOCK_CARDS


def cards_for_scene(scene_type: SceneType) -> tuple[NightEventCard, ...]:
    return tuple(card for card in NIGHT_EVENT_CARDS if card.scene_type is scene_type)
