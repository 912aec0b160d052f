from lowborn.domain.models.npc import NpcTemplate

NPC_TEMPLATES = (
    NpcTemplate("quartermaster", "Quartermaster", "steady"),
    NpcTemplate("firewatcher", "Firewatcher", "wary"),
    NpcTemplate("ridge-scout", "Ridge Scout", "volatile"),
    NpcTemplate("gate-runner", "Gate Runner", "steady"),
    NpcTemplate("signal-keeper", "Signal Keeper", "wary"),
    NpcTemplate("mess-cook", "Mess Cook", "steady"),
    NpcTemplate("north-scout", "North Scout", "volatile"),
    NpcTemplate("armory-clerk", "Armory Clerk", "wary"),
    NpcTemplate("barracks-sergeant", "Barracks Sergeant", "steady"),
    NpcTemplate("outer-sentry", "Outer Sentry", "volatile"),
)
