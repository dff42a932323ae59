"""Voice agent configurations and coaching prompts"""
