"""A stack of bills leaves a phone, follows a curved path and lands in a bank."""
from __future__ import annotations

import math
from typing import List, Optional

from rendering.primitives import (
    create_box,
    create_cone,
    create_cylinder,
    create_plane,
    create_polyline,
    create_ring,
)
from rendering.scene import POINT, Group, Light, Material, Mesh, create_entity, hex_color
from timeline.assets import FontHandle
from timeline.curves import CubicBezier
from timeline.easing import clamp01
from timeline.show import Show

from .common import ambient, make_text, set_emissive_intensity

PHONE_HOME = (-5.0, 0.0, 0.0)
MONEY_HOME = (-5.0, 1.0, 0.0)
BANK_HOME = (5.0, 0.0, 0.0)
HIDDEN_SCALE = 0.01
PATH_OPACITY = 0.6


class MoneyTransferShow(Show):
    SHOW_ID = "money-transfer"
    TITLE = "Money Transfer"
    STAGES = (
        ("intro", 2.0),
        ("move_start", 3.0),
        ("journey", 5.0),
        ("arrival", 3.0),
        ("complete", 3.0),
    )
    SEED = 5
    CAMERA_POSITION = (0.0, 0.0, 15.0)

    BACKGROUND = hex_color(0x0A0A14)
    BILL_COUNT = 7
    TRANSFER_CURVE = CubicBezier(
        start=(-5.0, 2.5, 0.0),
        control1=(-2.0, 3.0, 0.0),
        control2=(2.0, 3.0, 0.0),
        end=(5.0, 0.0, 0.0),
    )
    PATH_SAMPLES = 50
    AMOUNT_LABEL = "$38 Million"
    COMPLETE_LABEL = "Transaction Complete"
    CAMERA_PULL_BACK = 5.0

    def build(self) -> None:
        self.scene.background = self.BACKGROUND
        self.phone = self.own(self._create_phone())
        self.money = self.own(self._create_money())
        self.bank = self.own(self._create_bank())
        self.path = self.own(
            create_entity(
                create_polyline(self.TRANSFER_CURVE.sample(self.PATH_SAMPLES)),
                Material(color=hex_color(0x4488FF), transparent=True, opacity=0.0, lit=False),
                kind="line",
                name="transfer-path",
            )
        )
        self.own(ambient(hex_color(0x404040), 2.0))
        blue = Light(POINT, hex_color(0x6699FF), 10.0, distance=20.0, name="blue-light")
        blue.set_position(-3.0, 2.0, 5.0)
        green = Light(POINT, hex_color(0x44FF88), 10.0, distance=20.0, name="green-light")
        green.set_position(3.0, -2.0, 5.0)
        self.own(blue)
        self.own(green)

        self.amount_text: Optional[Mesh] = None
        self.complete_text: Optional[Mesh] = None
        self.request_font(self._on_font)

    # ------------------------------------------------------------------
    # Construction
    def _create_phone(self) -> Group:
        phone = Group("phone")
        phone.add(
            create_entity(
                create_box(1.5, 3.0, 0.1),
                Material(color=hex_color(0x111111), metalness=0.9, roughness=0.1),
                name="body",
            )
        )
        screen = create_entity(
            create_box(1.3, 2.7, 0.11),
            Material(
                color=hex_color(0x88CCFF),
                emissive=hex_color(0x1155AA),
                emissive_intensity=0.5,
                metalness=0.9,
                roughness=0.1,
            ),
            name="screen",
        )
        screen.position[2] = 0.01
        phone.add(screen)
        # (width, height, color, y, z) of the flat banking-app panels.
        panels = (
            (1.1, 2.5, 0xFFFFFF, 0.0, 0.06),
            (1.1, 0.3, 0x2266CC, 1.0, 0.07),
            (0.8, 0.2, 0x44CC88, 0.5, 0.07),
            (0.8, 0.3, 0xFF5533, -0.3, 0.07),
        )
        for width, height, color, y, z in panels:
            panel = create_entity(
                create_plane(width, height), Material(color=hex_color(color), lit=False)
            )
            panel.set_position(0.0, y, z)
            phone.add(panel)
        return phone

    def _create_money(self) -> Group:
        money = Group("money")
        for i in range(self.BILL_COUNT):
            bill = create_entity(
                create_box(1.2, 0.5, 0.01),
                Material(color=hex_color(0xECF0E1), metalness=0.1, roughness=0.6),
                name=f"bill-{i}",
            )
            bill.set_position(
                self.rng.uniform(-0.025, 0.025), self.rng.uniform(-0.025, 0.025), 0.01 * i
            )
            bill.rotation[2] = self.rng.uniform(-0.05, 0.05)
            money.add(bill)
            for x in (-0.35, 0.35):
                seal = create_entity(
                    create_ring(0.15, 0.2, 32),
                    Material(color=hex_color(0x106630), lit=False, double_sided=True),
                )
                seal.set_position(x, 0.0, 0.011 + 0.01 * i)
                money.add(seal)
            for j in range(3):
                stripe = create_entity(
                    create_plane(0.6, 0.03), Material(color=hex_color(0x106630), lit=False)
                )
                stripe.set_position(0.0, -0.1 + j * 0.1, 0.011 + 0.01 * i)
                money.add(stripe)
        money.add(
            create_entity(
                create_box(1.4, 0.7, 0.3),
                Material(
                    color=hex_color(0x88FF99),
                    transparent=True,
                    opacity=0.2,
                    back_side=True,
                    lit=False,
                ),
                name="money-glow",
            )
        )
        return money

    def _create_bank(self) -> Group:
        bank = Group("bank")
        stone = dict(metalness=0.5, roughness=0.5)
        bank.add(
            create_entity(
                create_box(2.0, 2.0, 1.0),
                Material(color=hex_color(0xAAAAAA), emissive=hex_color(0x223355), **stone),
                name="building",
            )
        )
        roof = create_entity(
            create_cone(1.5, 1.0, 4), Material(color=hex_color(0x444444), **stone), name="roof"
        )
        roof.set_transform(position=(0.0, 1.5, 0.0), rotation=(0.0, math.pi / 4.0, 0.0))
        bank.add(roof)
        for i in range(4):
            column = create_entity(
                create_cylinder(0.1, 0.1, 1.6, 16),
                Material(color=(1.0, 1.0, 1.0), metalness=0.3, roughness=0.7),
                name=f"column-{i}",
            )
            column.set_position(-0.8 if i < 2 else 0.8, -0.2, -0.6 if i % 2 == 0 else 0.6)
            bank.add(column)
        steps = create_entity(
            create_box(2.4, 0.2, 1.2),
            Material(color=hex_color(0x999999), metalness=0.3, roughness=0.7),
            name="steps",
        )
        steps.set_position(0.0, -1.0, 0.1)
        bank.add(steps)
        bank.add(
            create_entity(
                create_box(2.4, 2.4, 1.4),
                Material(
                    color=hex_color(0x5588FF),
                    transparent=True,
                    opacity=0.2,
                    back_side=True,
                    lit=False,
                ),
                name="bank-glow",
            )
        )
        return bank

    def _on_font(self, font: FontHandle) -> None:
        dollar = make_text(font, "$", 0.4, hex_color(0x106630), emissive_intensity=0.3)
        dollar.position[2] = 0.1
        dollar.set_opacity(1.0)
        dollar.set_visible(True)
        self.money.add(dollar)

        self.amount_text = self.own(
            make_text(
                font,
                self.AMOUNT_LABEL,
                0.4,
                hex_color(0xFFFF00),
                center=False,
                emissive_intensity=0.5,
                position=(-6.5, 2.0, 0.0),
            )
        )
        self.amount_text.set_opacity(1.0)
        self.complete_text = self.own(
            make_text(
                font,
                self.COMPLETE_LABEL,
                0.5,
                hex_color(0x44FF44),
                emissive_intensity=0.5,
                position=(0.0, 3.0, 0.0),
            )
        )

    # ------------------------------------------------------------------
    # Stages
    def stage_handlers(self):
        return (
            self._introduce,
            self._begin_transfer,
            self._journey,
            self._arrive,
            self._complete,
        )

    def reset(self) -> None:
        self.phone.set_transform(position=PHONE_HOME, scale=HIDDEN_SCALE)
        self.money.set_transform(position=MONEY_HOME, rotation=(0.0, 0.0, 0.0), scale=HIDDEN_SCALE)
        self.money.set_visible(True)
        self.bank.set_transform(position=BANK_HOME, scale=HIDDEN_SCALE)
        self.bank.set_visible(False)
        set_emissive_intensity(self.bank, 0.5)
        self.path.set_opacity(0.0)
        for label in self._labels():
            label.set_visible(False)
        self.camera.set_pose(self.CAMERA_POSITION, self.CAMERA_TARGET)

    def _labels(self) -> List[Mesh]:
        return [label for label in (self.amount_text, self.complete_text) if label is not None]

    def _float_offset(self, speed: float, amount: float) -> float:
        return math.sin(self.elapsed * speed) * amount

    def _introduce(self, progress: float) -> None:
        self.phone.set_scale(max(HIDDEN_SCALE, min(1.0, progress * 2.0)))
        if progress > 0.5:
            self.money.set_scale(max(HIDDEN_SCALE, min(1.0, (progress - 0.5) * 4.0)))
        else:
            self.money.set_scale(HIDDEN_SCALE)
        if self.amount_text is not None:
            self.amount_text.set_visible(progress > 0.7)
            self.amount_text.set_position(-6.5, 2.0 + self._float_offset(2.0, 0.05), 0.0)

    def _begin_transfer(self, progress: float) -> None:
        self.phone.set_scale(1.0)
        self.money.set_scale(1.0)
        self.money.set_position(MONEY_HOME[0], MONEY_HOME[1] + progress * 1.5, MONEY_HOME[2])
        self.money.rotation[:] = (0.0, progress * math.pi, 0.0)
        self.path.set_opacity(progress * PATH_OPACITY)

        self.bank.set_visible(progress > 0.7)
        self.bank.set_scale(max(HIDDEN_SCALE, min(1.0, (progress - 0.7) / 0.3)))

        if self.amount_text is not None:
            self.amount_text.set_visible(True)
            self.amount_text.set_position(
                -6.5 + progress * 1.5, 2.0 + self._float_offset(2.0, 0.05), 0.0
            )

    def _journey(self, progress: float) -> None:
        point = self.TRANSFER_CURVE.point_at(progress)
        time = self.elapsed
        self.money.set_transform(
            position=point,
            rotation=(math.sin(time) * 0.3, time * 2.0, 0.0),
            scale=1.0,
        )
        self.path.set_opacity(PATH_OPACITY)
        self.bank.set_visible(True)
        self.bank.set_scale(1.0 + self._float_offset(5.0, 0.05))
        if self.amount_text is not None:
            self.amount_text.set_visible(True)
            self.amount_text.set_position(point[0], point[1] + 0.8, point[2])

    def _arrive(self, progress: float) -> None:
        time = self.elapsed
        self.money.set_transform(
            position=self.TRANSFER_CURVE.end,
            rotation=(0.0, time * (1.0 - progress) * 2.0, 0.0),
            scale=1.0 - progress * 0.9,
        )
        self.bank.set_visible(True)
        set_emissive_intensity(self.bank, 0.5 + progress * 0.5)
        self.bank.set_scale(1.0 + math.sin(time * 10.0) * 0.1 * progress)
        if self.amount_text is not None:
            self.amount_text.set_visible(progress < 0.5)

    def _complete(self, progress: float) -> None:
        self.money.set_visible(False)
        self.path.set_opacity(PATH_OPACITY * (1.0 - progress))
        self.bank.set_visible(True)
        self.bank.set_scale(1.0 + self._float_offset(3.0, 0.1))
        if self.amount_text is not None:
            self.amount_text.set_visible(False)
        if self.complete_text is not None:
            shown = progress > 0.2
            self.complete_text.set_visible(shown)
            if shown:
                self.complete_text.set_opacity(clamp01((progress - 0.2) * 2.0))
                self.complete_text.set_position(0.0, 3.0 + self._float_offset(2.0, 0.1), 0.0)

        x, y, _ = self.CAMERA_POSITION
        pull_back = clamp01((progress - 0.5) * 2.0) * self.CAMERA_PULL_BACK
        self.camera.set_position(x, y, self.CAMERA_POSITION[2] + pull_back)
