from pydantic import BaseModel, Field

from agentloop import AgentApp, AgentConfig, ToolDeclaration, ToolRegistry
from agentloop.tools import Capability

import logging

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)

# --------------------------------
# Consumer data (injected, not global to the agent)
# --------------------------------

WEATHER = {
    "San Francisco, CA": {"temperature": "70°F", "conditions": "Sunny", "wind": "5 mph", "humidity": "60%"},
    "New York City, NY": {"temperature": "65°F", "conditions": "Partly Cloudy", "wind": "10 mph", "humidity": "55%"},
    "Phoenix, AZ": {"temperature": "95°F", "conditions": "Sunny", "wind": "7 mph", "humidity": "20%"},
    "Dallas, TX": {"temperature": "80°F", "conditions": "Clear", "wind": "8 mph", "humidity": "45%"},
}


class WeatherArgs(BaseModel):
    location: str = Field(description="City and state, e.g. 'Dallas, TX'")


def get_weather(args):
    report = WEATHER.get(args["location"])
    if report is None:
        return {"error": f"No weather data for {args['location']}"}
    return {"location": args["location"], **report}


# --------------------------------
# Custom Tools
# --------------------------------

registry = ToolRegistry()

registry.register(
    ToolDeclaration(
        name="getWeather",
        description="Get the current weather for a location.",
        args_model=WeatherArgs,
        capability=Capability.SIDE_EFFECT,
    ),
    get_weather,
)

# --------------------------------
# Create Agent
# --------------------------------

agent = AgentApp.create(AgentConfig.from_env(), registry=registry)

# --------------------------------
# Run conversation
# --------------------------------

print("\n=== Conversation Start (type 'exit' to quit) ===\n")

while True:
    try:
        user_input = input("You: ").strip()
    except EOFError:
        break

    if user_input.lower() == "exit":
        break
    if not user_input:
        continue

    result = agent.conversation.send(user_input)

    if result.is_done:
        print(f"Assistant: {result.answer}\n")
    else:
        print(f"[{result.status.value}] {result.error}\n")

print("\n=== Conversation End ===\n")

# --------------------------------
# Inspect memory
# --------------------------------

print("--- Memory State ---")
for record in agent.store.records():
    print(f"Id={record.id[:8]}, Tokens={record.token_count}, Content={record.content}")
