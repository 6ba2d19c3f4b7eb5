"""Celebration particle burst fired once a matching level is complete. Purely cosmetic: nothing in the game state depends on it."""

import random
from dataclasses import dataclass
from typing import Optional, Self

PARTICLE_COUNT = 150
PARTICLE_LIFE = 100  # frames
GRAVITY = 0.2
COLORS = ("#4e54c8", "#00b09b", "#ff416c", "#f9d423")


@dataclass
class Particle:
    x: float
    y: float
    r: float
    dx: float
    dy: float
    color: str
    life: int = PARTICLE_LIFE

    @property
    def is_alive(self) -> bool:
        return self.life > 0

    def step(self) -> None:
        """Simple Euler integration with constant downward gravity."""
        self.x += self.dx
        self.y += self.dy
        self.dy += GRAVITY
        self.life -= 1


@dataclass
class ParticleBurst:
    width: float
    height: float
    particles: list[Particle]
    frame: int = 0

    @classmethod
    def spawn(
        cls,
        width: float,
        height: float,
        seed: Optional[int] = None,
        count: int = PARTICLE_COUNT,
    ) -> Self:
        """All particles start at the center of the canvas with a random radius, velocity and color."""
        rng = random.Random(seed)
        center_x, center_y = width / 2, height / 2
        particles = [
            Particle(
                x=center_x,
                y=center_y,
                r=rng.random() * 6 + 2,
                dx=rng.random() * 10 - 5,
                dy=rng.random() * 10 - 5,
                color=rng.choice(COLORS),
            )
            for _ in range(count)
        ]
        return cls(width=width, height=height, particles=particles)

    @property
    def is_active(self) -> bool:
        return any(p.is_alive for p in self.particles)

    def step(self) -> bool:
        """Advance one frame. Dead particles are no longer drawn nor moved. Returns True while anything is still alive."""
        for particle in self.particles:
            if particle.is_alive:
                particle.step()
        self.frame += 1
        return self.is_active

    def advance_to(self, frame: int) -> None:
        while self.frame < frame and self.is_active:
            self.step()

    def visible(self) -> list[Particle]:
        return [p for p in self.particles if p.is_alive]
