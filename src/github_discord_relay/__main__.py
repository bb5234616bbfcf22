from github_discord_relay.cli import app

app(prog_name="github-discord-relay")
